"""Scoring Orchestrator - chunked, sequential scoring of a patent batch.

Handles:
1. Request validation (before any external call)
2. Skipping patents with blank metadata
3. Mock mode when no credential is configured (gateway never touched)
4. Partitioning into fixed-size chunks and scoring them strictly in order:
   prompt -> gateway -> reconcile -> append
5. Progress reporting after every chunk, with a short pause between chunks
6. Cooperative cancellation between chunks

All per-run state (accumulator, progress counter) lives in local variables
of score_batch, so one orchestrator can serve independent runs.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from patent_ranker.batch import valid_documents
from patent_ranker.config import ScoringSettings, load_settings
from patent_ranker.constants import RATE_LIMIT_INITIAL_BACKOFF_SECONDS
from patent_ranker.errors import InvalidRequest, ScoringCancelled, ServiceError
from patent_ranker.llm.llm_client import LLMClient, LLMResponse
from patent_ranker.llm.prompt_builder import ScoringPrompt, build_scoring_prompt
from patent_ranker.llm.schemas import BatchRequest, BatchResponse, DocumentInput, ScoreRecord
from patent_ranker.scorers.mock_scorer import generate_mock_score
from patent_ranker.services.response_reconciler import reconcile_or_raise

logger = logging.getLogger(__name__)

STAGE_PREPARING = "Preparing analysis..."
STAGE_COMPLETE = "Analysis complete!"


@dataclass(frozen=True)
class ScoringProgress:
    """Progress snapshot: ``current`` of ``total`` patents done."""

    current: int
    total: int
    stage: str
    document_id: Optional[str] = None


ProgressCallback = Callable[[ScoringProgress], None]


def validate_request(request: Union[BatchRequest, Mapping[str, Any]]) -> BatchRequest:
    """
    Validate a caller payload against the BatchRequest schema.

    Raises:
        InvalidRequest: With per-field issues if the payload is malformed
    """
    if isinstance(request, BatchRequest):
        return request
    try:
        return BatchRequest.model_validate(request)
    except ValidationError as e:
        issues = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]} for err in e.errors()
        ]
        raise InvalidRequest(
            "Invalid request data: " + "; ".join(f"{i['loc']}: {i['msg']}" for i in issues),
            details={"issues": issues},
        ) from e


def partition_chunks(documents: Sequence[DocumentInput], chunk_size: int) -> list[list[DocumentInput]]:
    """Split into contiguous chunks of ``chunk_size`` (last chunk may be shorter)."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return [list(documents[i : i + chunk_size]) for i in range(0, len(documents), chunk_size)]


class ScoringOrchestrator:
    """Drives one or more scoring runs.

    Usage:
        orchestrator = ScoringOrchestrator()  # settings from environment
        response = orchestrator.score_batch({"problemStatement": "...", "patents": [...]})
    """

    def __init__(
        self,
        settings: Optional[ScoringSettings] = None,
        llm_client: Optional[LLMClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the orchestrator.

        Args:
            settings: Scoring settings (defaults to load_settings())
            llm_client: Pre-built gateway; when given, real scoring is used
                even if settings carry no credential
            sleep: Pause function, replaceable in tests
        """
        self.settings = settings or load_settings()
        self._llm_client = llm_client
        self._sleep = sleep

    @property
    def using_real_ai(self) -> bool:
        return self._llm_client is not None or self.settings.has_credential

    def get_llm_client(self) -> LLMClient:
        """Get or create the gateway. Only called in real mode."""
        if self._llm_client is None:
            self._llm_client = LLMClient(
                api_key=self.settings.api_key,
                model=self.settings.model,
                timeout_seconds=self.settings.request_timeout_seconds,
            )
        return self._llm_client

    def score_batch(
        self,
        request: Union[BatchRequest, Mapping[str, Any]],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchResponse:
        """
        Score a batch of 1-5 patents.

        Args:
            request: BatchRequest or its camelCase dict form
            progress: Optional callback receiving ScoringProgress updates
            cancel_event: Optional event; when set, the run stops before the
                next chunk is merged and nothing is returned

        Returns:
            BatchResponse with one record per non-blank patent, in input order

        Raises:
            InvalidRequest: Malformed request (no external call made)
            ServiceError, EmptyResponse: Gateway failure (run aborted)
            MalformedResponse, MissingResultsField, InvalidScoreSchema:
                Unrecoverable LLM output (run aborted)
            ScoringCancelled: cancel_event was set
        """
        batch = validate_request(request)
        documents = valid_documents(batch.patents)
        skipped = len(batch.patents) - len(documents)
        if skipped:
            logger.info(f"Skipping {skipped} patent(s) with blank metadata")

        def report(current: int, stage: str, document_id: Optional[str] = None) -> None:
            if progress is not None:
                progress(ScoringProgress(current, len(documents), stage, document_id))

        if not documents:
            logger.warning("No patents with metadata to analyze")
            return BatchResponse(results=[], using_real_ai=self.using_real_ai)

        if not self.using_real_ai:
            logger.warning("LLM API key not found, returning mock data")
            results = [generate_mock_score(d.id, batch.problem_statement) for d in documents]
            report(len(documents), STAGE_COMPLETE)
            return BatchResponse(results=results, using_real_ai=False)

        return self._score_with_llm(batch.problem_statement, documents, report, cancel_event)

    def _score_with_llm(
        self,
        problem_statement: str,
        documents: list[DocumentInput],
        report: Callable[..., None],
        cancel_event: Optional[threading.Event],
    ) -> BatchResponse:
        chunks = partition_chunks(documents, self.settings.chunk_size)
        results: list[ScoreRecord] = []
        completed = 0

        logger.info(
            f"Scoring {len(documents)} patents in {len(chunks)} chunk(s) of up to {self.settings.chunk_size}; "
            f"problem statement length: {len(problem_statement)} characters"
        )
        report(0, STAGE_PREPARING)

        for index, chunk in enumerate(chunks):
            self._check_cancelled(cancel_event)
            ids = ", ".join(d.id for d in chunk)
            report(completed, f"Analyzing patents {ids}...", chunk[0].id)

            records = self._score_chunk(problem_statement, chunk)

            # Discard the finished chunk if the run was aborted while it was in flight
            self._check_cancelled(cancel_event)
            results.extend(records)
            completed += len(chunk)
            report(completed, f"Completed patents {ids}", chunk[0].id)

            if index < len(chunks) - 1 and self.settings.chunk_pause_seconds > 0:
                self._sleep(self.settings.chunk_pause_seconds)

        report(len(documents), STAGE_COMPLETE)
        return BatchResponse(results=results, using_real_ai=True)

    def _score_chunk(self, problem_statement: str, chunk: list[DocumentInput]) -> list[ScoreRecord]:
        """Prompt -> gateway -> reconcile for one chunk."""
        prompt = build_scoring_prompt(problem_statement, chunk)
        logger.info(f"Calling LLM with {len(chunk)} patent(s): {', '.join(prompt.document_ids)}")

        response = self._generate_with_retry(prompt)
        logger.info(
            f"LLM response received for patents {', '.join(prompt.document_ids)}, length: {len(response.text)}"
        )
        logger.debug(f"LLM call tracking: {response.to_log_record()}")

        records = reconcile_or_raise(response.text, chunk)
        for record in records:
            logger.debug(
                f"Patent {record.id}: strategicRelevance={record.per_category.strategic_relevance.score} "
                f"weightedTotal={record.weighted_total:.2f}"
            )
        return records

    def _generate_with_retry(self, prompt: ScoringPrompt) -> LLMResponse:
        """Call the gateway, retrying transient service errors if configured."""
        client = self.get_llm_client()
        max_retries = self.settings.rate_limit_retries
        attempt = 0

        while True:
            try:
                return client.generate(
                    prompt.user_prompt,
                    system_prompt=prompt.system_prompt,
                    temperature=self.settings.temperature,
                    max_tokens=self.settings.max_tokens,
                    json_mode=True,
                    prompt_version=prompt.prompt_version,
                )
            except ServiceError as e:
                if not e.transient or attempt >= max_retries:
                    raise
                wait_time = RATE_LIMIT_INITIAL_BACKOFF_SECONDS * (2**attempt)
                attempt += 1
                logger.warning(f"Rate limit hit, retrying in {wait_time:.0f}s (attempt {attempt}/{max_retries})")
                self._sleep(wait_time)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Scoring run cancelled; discarding partial results")
            raise ScoringCancelled("Scoring run was cancelled")
