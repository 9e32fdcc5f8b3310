"""Exception hierarchy for the scoring engine.

Every failure the engine surfaces derives from PatentRankerError so callers
can catch one type. Reconciliation failures share ReconcileError, which is
also the error half of the reconciler's tagged result.
"""

from typing import Any, Optional


class PatentRankerError(Exception):
    """Base class for all scoring engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON error responses."""
        result: dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class InvalidRequest(PatentRankerError):
    """Caller-supplied batch violates the request schema. Never retried."""


class ServiceError(PatentRankerError):
    """LLM service unreachable, unauthorized, rate limited, or timed out."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        transient: bool = False,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.model = model
        self.transient = transient


class EmptyResponse(PatentRankerError):
    """LLM service returned no content."""


class ScoringCancelled(PatentRankerError):
    """Run was cancelled before completion; no partial results are kept."""


class ReconcileError(PatentRankerError):
    """Base class for failures turning oracle output into score records."""


class MalformedResponse(ReconcileError):
    """Oracle output could not be parsed as JSON."""


class MissingResultsField(ReconcileError):
    """Oracle output parsed but contains no recognizable results collection."""


class InvalidScoreSchema(ReconcileError):
    """Reconciled records still fail schema validation. Never retried."""
