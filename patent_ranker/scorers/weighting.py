"""Category weights and weighted composite scoring.

The weight vector is a process-wide constant: built once at import,
validated, and exposed read-only. The LLM never does this math; any total it
reports is discarded and recomputed here.

Usage:
    from patent_ranker.scorers.weighting import SCORING_WEIGHTS, compute_weighted_total

    total = compute_weighted_total(record.per_category)
"""

import math
from types import MappingProxyType
from typing import Iterable, Mapping

from patent_ranker.constants import MAX_CATEGORY_SCORE, MIN_CATEGORY_SCORE
from patent_ranker.llm.schemas import Category, PerCategoryScores, ScoreRecord

WEIGHT_TOTAL = 1.0

_BASE_WEIGHTS = {
    Category.STRATEGIC_RELEVANCE: 0.30,
    Category.TECHNICAL_STRENGTH: 0.20,
    Category.LEGAL_DURABILITY: 0.15,
    Category.MARKET_LEVERAGE: 0.15,
    Category.FREEDOM_TO_OPERATE: 0.10,
    Category.LICENSING_FEASIBILITY: 0.10,
}


def _validate_weights(weights: Mapping[Category, float]) -> None:
    """Validate that weights cover every category exactly and sum to 1.0."""
    missing = set(Category) - set(weights.keys())
    if missing:
        raise ValueError(f"Weight vector missing categories: {sorted(c.value for c in missing)}")
    extra = set(weights.keys()) - set(Category)
    if extra:
        raise ValueError(f"Weight vector has unexpected keys: {extra}")
    negative = [c.value for c, w in weights.items() if w < 0]
    if negative:
        raise ValueError(f"Weight vector has negative weights: {negative}")
    total = sum(weights.values())
    if not math.isclose(total, WEIGHT_TOTAL, abs_tol=1e-9):
        raise ValueError(f"Weights sum to {total}, expected {WEIGHT_TOTAL}")


_validate_weights(_BASE_WEIGHTS)

SCORING_WEIGHTS: Mapping[Category, float] = MappingProxyType(dict(_BASE_WEIGHTS))


def weights_by_key(weights: Mapping[Category, float] = SCORING_WEIGHTS) -> dict[str, float]:
    """Weights keyed by camelCase category key, in category order (for prompts/JSON)."""
    return {category.value: weights[category] for category in Category}


def compute_weighted_total(
    per_category: PerCategoryScores,
    weights: Mapping[Category, float] = SCORING_WEIGHTS,
) -> float:
    """Dot product of the six category scores with the weight vector.

    No rounding; rounding is a display concern. The result is pinned to
    [0, 100] to absorb float error (0.30 * 100 == 30.000000000000004).
    """
    total = sum(score.score * weights[category] for category, score in per_category.items())
    return min(float(MAX_CATEGORY_SCORE), max(float(MIN_CATEGORY_SCORE), total))


def build_score_record(
    document_id: str,
    per_category: PerCategoryScores,
    weights: Mapping[Category, float] = SCORING_WEIGHTS,
) -> ScoreRecord:
    """Create a ScoreRecord with a locally computed weighted total."""
    return ScoreRecord(
        id=document_id,
        per_category=per_category,
        weighted_total=compute_weighted_total(per_category, weights),
    )


def rank_results(records: Iterable[ScoreRecord]) -> list[ScoreRecord]:
    """Sort records by weighted total, highest first.

    Ties keep their input order (stable sort), so equal totals rank by
    position in the batch.
    """
    return sorted(records, key=lambda r: r.weighted_total, reverse=True)
