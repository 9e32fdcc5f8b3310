"""
Response Reconciler - turns untrusted LLM output into guaranteed score records.

Pipeline (each step either succeeds or yields a ReconcileError):
1. Decode:       raw text -> JSON value                    (MalformedResponse)
2. Locate:       ordered shape strategies -> record list   (MissingResultsField)
3. Match:        keep one record per expected id, in input order; surplus
                 records (unknown ids, duplicates) are dropped
4. Complete:     synthesize 25-point placeholders for ids the model skipped
5. Reweight:     weighted totals recomputed locally, model values discarded
6. Validate:     full ScoreRecord / BatchResponse schema   (InvalidScoreSchema)

The result is a tagged value: Ok(records) or Err(error). Callers that want
exceptions use reconcile_or_raise().
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import ValidationError

from patent_ranker.constants import PLACEHOLDER_RATIONALE, PLACEHOLDER_SCORE
from patent_ranker.errors import (
    InvalidScoreSchema,
    MalformedResponse,
    MissingResultsField,
    ReconcileError,
)
from patent_ranker.llm.schemas import (
    BatchResponse,
    Category,
    DocumentInput,
    OracleScoreRecord,
    ScoreRecord,
)
from patent_ranker.scorers.weighting import build_score_record

logger = logging.getLogger(__name__)

RESPONSE_PREVIEW_CHARS = 500


# =============================================================================
# Tagged result
# =============================================================================


@dataclass(frozen=True)
class Ok:
    """Reconciled records, exactly one per expected id, in input order."""

    records: tuple[ScoreRecord, ...]
    placeholder_ids: tuple[str, ...] = ()
    dropped_count: int = 0
    strategy: str = ""


@dataclass(frozen=True)
class Err:
    error: ReconcileError


ReconcileResult = Union[Ok, Err]


# =============================================================================
# Step 1: decode
# =============================================================================


def _strip_markdown_fences(text: str) -> str:
    """Some models wrap JSON in ```json fences even in JSON mode."""
    match = re.match(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", text, re.DOTALL | re.IGNORECASE)
    return match.group(1).strip() if match else text.strip()


def _remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", text)


def decode_response(raw_text: str) -> Any:
    """
    Parse raw model text as JSON.

    Tolerates markdown fences and trailing commas; anything else that fails
    to parse is malformed. Truncated output is not closed up, since a
    half-record must not turn into a silently penalized one.

    Raises:
        MalformedResponse: If the text is not valid JSON or cannot be decoded
    """
    text = _strip_markdown_fences(raw_text or "")
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as first_error:
        # JSONDecodeError, oversized integer literals, pathological nesting
        try:
            value = json.loads(_remove_trailing_commas(text))
        except (ValueError, RecursionError):
            logger.error(
                f"Unparseable LLM response (first {RESPONSE_PREVIEW_CHARS} chars): "
                f"{text[:RESPONSE_PREVIEW_CHARS]}"
            )
            raise MalformedResponse(
                f"Invalid JSON response from LLM: {first_error}",
                details={"response_length": len(raw_text or ""), "preview": text[:RESPONSE_PREVIEW_CHARS]},
            ) from first_error
        logger.info(f"LLM JSON repaired (trailing commas); original error: {first_error}")
        return value


# =============================================================================
# Step 2: locate results collection
# =============================================================================


def _keyed_list(key: str) -> Callable[[Any], Optional[list]]:
    def extract(parsed: Any) -> Optional[list]:
        if isinstance(parsed, dict) and isinstance(parsed.get(key), list):
            return parsed[key]
        return None

    return extract


def _bare_list(parsed: Any) -> Optional[list]:
    return parsed if isinstance(parsed, list) else None


# Tried in order; first strategy that returns a list wins
RESULT_STRATEGIES: tuple[tuple[str, Callable[[Any], Optional[list]]], ...] = (
    ("results", _keyed_list("results")),
    ("bare_array", _bare_list),
    ("patents", _keyed_list("patents")),
    ("scores", _keyed_list("scores")),
)


def _top_level_keys(parsed: Any) -> list[str]:
    return sorted(parsed.keys()) if isinstance(parsed, dict) else [type(parsed).__name__]


def locate_results(parsed: Any) -> tuple[str, list]:
    """
    Find the record list in a decoded response.

    Returns:
        (strategy_name, records)

    Raises:
        MissingResultsField: If no strategy matches
    """
    for name, extract in RESULT_STRATEGIES:
        records = extract(parsed)
        if records is not None:
            if name != "results":
                logger.warning(f"LLM response missing 'results' array; using '{name}' shape")
            return name, records

    keys = _top_level_keys(parsed)
    raise MissingResultsField(
        f"LLM response missing 'results' array. Response structure: {keys}",
        details={"response_keys": keys},
    )


# =============================================================================
# Steps 3-4: match and complete
# =============================================================================


def _record_id(raw: Any) -> Optional[str]:
    """Normalized id of a raw record, or None if it has no usable id.

    Integer ids (a common model drift for "1", "2") are accepted as strings.
    """
    if not isinstance(raw, dict):
        return None
    value = raw.get("id")
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def placeholder_record(document_id: str) -> dict[str, Any]:
    """Raw record for a patent the model did not return."""
    return {
        "id": document_id,
        "perCategory": {
            category.value: {"score": PLACEHOLDER_SCORE, "rationale": PLACEHOLDER_RATIONALE}
            for category in Category
        },
    }


def match_records(
    raw_records: list, expected_ids: Sequence[str]
) -> tuple[list[dict[str, Any]], list[str], int]:
    """
    Align raw records with expected ids.

    Returns:
        (records in expected order, ids filled with placeholders, dropped count)
    """
    expected = set(expected_ids)
    by_id: dict[str, dict[str, Any]] = {}
    dropped = 0

    for raw in raw_records:
        record_id = _record_id(raw)
        if record_id is None or record_id not in expected:
            dropped += 1
            shown = raw.get("id") if isinstance(raw, dict) else raw
            logger.warning(f"Dropping LLM record with unexpected id: {shown!r}")
            continue
        if record_id in by_id:
            dropped += 1
            logger.warning(f"Dropping duplicate LLM record for patent {record_id}")
            continue
        by_id[record_id] = {**raw, "id": record_id}

    missing = [i for i in expected_ids if i not in by_id]
    if missing:
        logger.error(
            f"Expected {len(expected_ids)} results, got {len(raw_records)}; "
            f"missing patents: {', '.join(missing)}"
        )
        for document_id in missing:
            by_id[document_id] = placeholder_record(document_id)
        logger.info(f"Added {len(missing)} placeholder results for missing patents")

    return [by_id[i] for i in expected_ids], missing, dropped


# =============================================================================
# Steps 5-6: reweight and validate
# =============================================================================


def _validation_summary(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": ".".join(str(part) for part in e["loc"]), "msg": e["msg"], "type": e["type"]}
        for e in error.errors()
    ]


def build_records(raw_records: list[dict[str, Any]]) -> list[ScoreRecord]:
    """
    Validate raw records and recompute weighted totals.

    Raises:
        InvalidScoreSchema: If any record fails validation
    """
    records = []
    for raw in raw_records:
        try:
            oracle_record = OracleScoreRecord.model_validate(raw)
            records.append(build_score_record(oracle_record.id, oracle_record.per_category))
        except ValidationError as e:
            issues = _validation_summary(e)
            raise InvalidScoreSchema(
                f"Invalid response format from AI for patent {raw.get('id')}: "
                + "; ".join(f"{i['loc']}: {i['msg']}" for i in issues),
                details={"patent_id": raw.get("id"), "issues": issues},
            ) from e

    # Whole-batch check; usingRealAI is set by the orchestrator
    try:
        BatchResponse(results=records, using_real_ai=True)
    except ValidationError as e:
        raise InvalidScoreSchema(
            "Invalid response format from AI", details={"issues": _validation_summary(e)}
        ) from e
    return records


# =============================================================================
# Entry points
# =============================================================================


def reconcile_response(raw_text: str, documents: Sequence[DocumentInput]) -> ReconcileResult:
    """
    Reconcile one chunk's raw LLM output against the chunk's patents.

    Args:
        raw_text: Raw response text from the gateway
        documents: The chunk's patents, in input order

    Returns:
        Ok with exactly len(documents) records, or Err with the failure
    """
    expected_ids = [d.id for d in documents]
    try:
        parsed = decode_response(raw_text)
        strategy, raw_records = locate_results(parsed)
        logger.info(f"Received {len(raw_records)} results for {len(expected_ids)} patents")

        matched, missing, dropped = match_records(raw_records, expected_ids)
        records = build_records(matched)
    except ReconcileError as e:
        e.details.setdefault("expected_count", len(expected_ids))
        e.details.setdefault("expected_ids", expected_ids)
        return Err(e)

    return Ok(
        records=tuple(records),
        placeholder_ids=tuple(missing),
        dropped_count=dropped,
        strategy=strategy,
    )


def reconcile_or_raise(raw_text: str, documents: Sequence[DocumentInput]) -> list[ScoreRecord]:
    """Like reconcile_response, but raises the ReconcileError on failure."""
    result = reconcile_response(raw_text, documents)
    if isinstance(result, Err):
        raise result.error
    return list(result.records)
