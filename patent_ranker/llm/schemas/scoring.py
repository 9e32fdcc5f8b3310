"""Pydantic schemas for patent scoring requests and responses.

Wire format is camelCase (matching the JSON the LLM is asked to return and
the JSON callers send); Python attributes are snake_case. All models accept
either form on input and should be dumped with ``by_alias=True``.
"""

from typing import Annotated, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator, model_validator

from patent_ranker.constants import (
    MAX_CATEGORY_SCORE,
    MAX_DOCUMENTS_PER_BATCH,
    MIN_CATEGORY_SCORE,
    MIN_DOCUMENTS_PER_BATCH,
)

from .enums import Category

_ScoreInt = Annotated[StrictInt, Field(ge=MIN_CATEGORY_SCORE, le=MAX_CATEGORY_SCORE)]
_ScoreFloat = Annotated[StrictFloat, Field(ge=MIN_CATEGORY_SCORE, le=MAX_CATEGORY_SCORE, allow_inf_nan=False)]
ScoreValue = Union[_ScoreInt, _ScoreFloat]


class DocumentInput(BaseModel):
    """One patent to score.

    ``id`` is positional within a batch ("1".."N"), see patent_ranker.batch.
    Evidence fields hold the pasted long answer for each category question.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="Position-based id, unique within the batch")
    metadata: str = Field("", description="Title, applicant, sector, date, abstract, use cases")
    strategic_relevance: str = Field("", alias="strategicRelevance")
    technical_strength: str = Field("", alias="technicalStrength")
    legal_durability: str = Field("", alias="legalDurability")
    market_leverage: str = Field("", alias="marketLeverage")
    freedom_to_operate: str = Field("", alias="freedomToOperate")
    licensing_feasibility: str = Field("", alias="licensingFeasibility")

    @property
    def has_metadata(self) -> bool:
        """Blank-metadata patents are skipped by the orchestrator."""
        return bool(self.metadata.strip())

    def evidence(self, category: Category) -> str:
        """Evidence text for a category."""
        return getattr(self, category.field_name)


class CategoryScore(BaseModel):
    """Score and rationale for one category."""

    model_config = ConfigDict(frozen=True)

    score: ScoreValue
    rationale: str = Field(..., min_length=1)

    @field_validator("rationale")
    @classmethod
    def rationale_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rationale must not be blank")
        return v


class PerCategoryScores(BaseModel):
    """Exactly six category scores, one per fixed category key."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    strategic_relevance: CategoryScore = Field(..., alias="strategicRelevance")
    technical_strength: CategoryScore = Field(..., alias="technicalStrength")
    legal_durability: CategoryScore = Field(..., alias="legalDurability")
    market_leverage: CategoryScore = Field(..., alias="marketLeverage")
    freedom_to_operate: CategoryScore = Field(..., alias="freedomToOperate")
    licensing_feasibility: CategoryScore = Field(..., alias="licensingFeasibility")

    def get(self, category: Category) -> CategoryScore:
        return getattr(self, category.field_name)

    def items(self) -> Iterator[tuple[Category, CategoryScore]]:
        """Iterate (category, score) in fixed category order."""
        for category in Category:
            yield category, self.get(category)

    @classmethod
    def from_mapping(cls, scores: dict[Category, CategoryScore]) -> "PerCategoryScores":
        return cls(**{category.field_name: scores[category] for category in Category})


class ScoreRecord(BaseModel):
    """Scored patent. ``weighted_total`` is always computed locally."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    per_category: PerCategoryScores = Field(..., alias="perCategory")
    weighted_total: float = Field(
        ..., alias="weightedTotal", ge=MIN_CATEGORY_SCORE, le=MAX_CATEGORY_SCORE, allow_inf_nan=False
    )


class OracleScoreRecord(BaseModel):
    """Per-patent record as returned by the LLM.

    Any weightedTotal the model supplies is ignored (extra fields are
    dropped) and recomputed by patent_ranker.scorers.weighting.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    per_category: PerCategoryScores = Field(..., alias="perCategory")


class BatchRequest(BaseModel):
    """Problem statement plus 1-5 patents."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    problem_statement: str = Field(..., alias="problemStatement", min_length=1)
    patents: list[DocumentInput] = Field(
        ..., min_length=MIN_DOCUMENTS_PER_BATCH, max_length=MAX_DOCUMENTS_PER_BATCH
    )

    @field_validator("problem_statement")
    @classmethod
    def problem_statement_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("problemStatement must not be blank")
        return v

    @model_validator(mode="after")
    def ids_unique(self) -> "BatchRequest":
        ids = [p.id for p in self.patents]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate patent ids in batch: {duplicates}")
        return self


class BatchResponse(BaseModel):
    """Ordered score records plus which scorer produced them."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    results: list[ScoreRecord] = Field(default_factory=list)
    using_real_ai: bool = Field(..., alias="usingRealAI")

    def to_json_dict(self) -> dict:
        """Dump in wire format."""
        return self.model_dump(by_alias=True, mode="json")
