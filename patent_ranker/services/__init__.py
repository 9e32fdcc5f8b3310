"""Scoring services: response reconciliation and chunked batch orchestration."""

from patent_ranker.services.response_reconciler import (
    Err,
    Ok,
    ReconcileResult,
    reconcile_or_raise,
    reconcile_response,
)
from patent_ranker.services.scoring_orchestrator import (
    ScoringOrchestrator,
    ScoringProgress,
    partition_chunks,
    validate_request,
)

__all__ = [
    "Err",
    "Ok",
    "ReconcileResult",
    "ScoringOrchestrator",
    "ScoringProgress",
    "partition_chunks",
    "reconcile_or_raise",
    "reconcile_response",
    "validate_request",
]
