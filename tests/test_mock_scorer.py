"""Tests for deterministic mock scoring."""

import pytest
from conftest import BATTERY_PROBLEM

from patent_ranker.llm.schemas import Category
from patent_ranker.scorers.mock_scorer import (
    calculate_mock_category_score,
    calculate_seed,
    describe_strength,
    generate_mock_score,
)


class TestCalculateSeed:
    def test_first_char_plus_length(self):
        """ord('1') == 49, len('reduce battery charging time') == 28."""
        assert calculate_seed("1", BATTERY_PROBLEM) == 77

    def test_only_first_char_matters(self):
        assert calculate_seed("1", "abc") == calculate_seed("1xyz", "def")

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            calculate_seed("", BATTERY_PROBLEM)


class TestCalculateMockCategoryScore:
    def test_known_values(self):
        """seed 77 → base 77, variations +2, +9, -14, -7, 0, +7."""
        assert [calculate_mock_category_score(77, i) for i in range(6)] == [79, 86, 63, 70, 77, 84]

    def test_clamped_to_ninety(self):
        """seed 119 → base 79, variation +14 → 93 → 90."""
        assert calculate_mock_category_score(119, 0) == 90

    @pytest.mark.parametrize("seed", range(40, 200, 7))
    def test_always_within_mock_range(self, seed):
        for index in range(6):
            assert 10 <= calculate_mock_category_score(seed, index) <= 90


class TestDescribeStrength:
    @pytest.mark.parametrize(
        "score,expected",
        [(71, "strong"), (70, "moderate"), (51, "moderate"), (50, "limited"), (10, "limited")],
    )
    def test_thresholds(self, score, expected):
        """Strictly greater than 70 / 50."""
        assert describe_strength(score) == expected


class TestGenerateMockScore:
    def test_battery_document_one(self):
        """Full record for id '1' and the battery problem."""
        record = generate_mock_score("1", BATTERY_PROBLEM)
        scores = [s.score for _, s in record.per_category.items()]
        assert scores == [79, 86, 63, 70, 77, 84]
        assert record.weighted_total == pytest.approx(76.95)

    def test_rationale_text(self):
        record = generate_mock_score("1", BATTERY_PROBLEM)
        assert record.per_category.get(Category.STRATEGIC_RELEVANCE).rationale == (
            "Mock analysis for strategicRelevance based on provided patent information. "
            "Score reflects strong potential in this area."
        )
        assert "moderate potential" in record.per_category.get(Category.MARKET_LEVERAGE).rationale

    def test_deterministic(self):
        assert generate_mock_score("2", BATTERY_PROBLEM) == generate_mock_score("2", BATTERY_PROBLEM)

    def test_ids_differ(self):
        assert generate_mock_score("1", BATTERY_PROBLEM) != generate_mock_score("2", BATTERY_PROBLEM)
