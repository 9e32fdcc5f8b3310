"""Pydantic schemas for patent scoring.

This module contains:
- DocumentInput: One patent with metadata and six evidence fields
- CategoryScore / PerCategoryScores: Score + rationale per category
- ScoreRecord: Scored patent with locally computed weighted total
- BatchRequest / BatchResponse: Engine input and output contracts
- Category: The six fixed evaluation categories
"""

from .enums import CATEGORY_KEYS, Category
from .scoring import (
    BatchRequest,
    BatchResponse,
    CategoryScore,
    DocumentInput,
    OracleScoreRecord,
    PerCategoryScores,
    ScoreRecord,
)

__all__ = [
    "CATEGORY_KEYS",
    "BatchRequest",
    "BatchResponse",
    "Category",
    "CategoryScore",
    "DocumentInput",
    "OracleScoreRecord",
    "PerCategoryScores",
    "ScoreRecord",
]
