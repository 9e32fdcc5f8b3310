"""Deterministic scoring modules: weight vector, composite totals, mock scorer."""

from patent_ranker.scorers.mock_scorer import (
    calculate_mock_category_score,
    calculate_seed,
    describe_strength,
    generate_mock_score,
)
from patent_ranker.scorers.weighting import (
    SCORING_WEIGHTS,
    build_score_record,
    compute_weighted_total,
    rank_results,
    weights_by_key,
)

__all__ = [
    "SCORING_WEIGHTS",
    "build_score_record",
    "calculate_mock_category_score",
    "calculate_seed",
    "compute_weighted_total",
    "describe_strength",
    "generate_mock_score",
    "rank_results",
    "weights_by_key",
]
