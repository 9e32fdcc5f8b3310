"""
Deterministic mock scoring - reproducible pseudo-scores with no LLM call.

Used when no LLM credential is configured (offline/dev mode) and as a
response-shape reference in tests. Output is a pure function of
(document_id, problem_statement):

- seed = code point of the id's first character + len(problem_statement)
- base = 40 + seed % 40                          (40-79)
- per category i: base + ((seed + 7i) % 30 - 15), clamped to 10-90
- weighted total from the fixed weight vector, unrounded
"""

from patent_ranker.constants import (
    MOCK_BASE_SCORE,
    MOCK_BASE_SPREAD,
    MOCK_MAX_SCORE,
    MOCK_MIN_SCORE,
    MOCK_VARIATION_SPREAD,
    MOCK_VARIATION_STEP,
    MODERATE_SCORE_THRESHOLD,
    STRONG_SCORE_THRESHOLD,
)
from patent_ranker.llm.schemas import Category, CategoryScore, PerCategoryScores, ScoreRecord
from patent_ranker.scorers.weighting import build_score_record


def calculate_seed(document_id: str, problem_statement: str) -> int:
    """Seed from the id's leading character plus the problem statement length."""
    if not document_id:
        raise ValueError("document_id must not be empty")
    return ord(document_id[0]) + len(problem_statement)


def calculate_mock_category_score(seed: int, index: int) -> int:
    """Score for the category at position ``index`` in fixed category order."""
    base = MOCK_BASE_SCORE + seed % MOCK_BASE_SPREAD
    variation = (seed + index * MOCK_VARIATION_STEP) % MOCK_VARIATION_SPREAD - MOCK_VARIATION_SPREAD // 2
    return max(MOCK_MIN_SCORE, min(MOCK_MAX_SCORE, base + variation))


def describe_strength(score: float) -> str:
    """Map a score to strong / moderate / limited."""
    if score > STRONG_SCORE_THRESHOLD:
        return "strong"
    if score > MODERATE_SCORE_THRESHOLD:
        return "moderate"
    return "limited"


def mock_rationale(category: Category, score: int) -> str:
    return (
        f"Mock analysis for {category.value} based on provided patent information. "
        f"Score reflects {describe_strength(score)} potential in this area."
    )


def generate_mock_score(document_id: str, problem_statement: str) -> ScoreRecord:
    """
    Produce a full ScoreRecord without any external call.

    Args:
        document_id: Patent id (only its first character matters)
        problem_statement: Problem statement (only its length matters)

    Returns:
        ScoreRecord with six mock category scores and weighted total
    """
    seed = calculate_seed(document_id, problem_statement)

    scores = {}
    for index, category in enumerate(Category):
        score = calculate_mock_category_score(seed, index)
        scores[category] = CategoryScore(score=score, rationale=mock_rationale(category, score))

    return build_score_record(document_id, PerCategoryScores.from_mapping(scores))
