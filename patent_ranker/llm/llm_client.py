"""
LLM gateway using LiteLLM.

Sends one chat completion per chunk with JSON-object output, low
temperature, and a conservative output-token ceiling. Returns raw text plus
tracking metadata. Performs no retries: LiteLLM's own retries are disabled
and retry policy belongs to the orchestrator.

Failures are normalized at this boundary:
- any transport / auth / rate-limit / timeout error -> ServiceError
- a response with no choices or no content          -> EmptyResponse

Usage:
    from patent_ranker.llm.llm_client import LLMClient

    client = LLMClient(api_key=settings.api_key)
    response = client.generate(prompt.user_prompt, system_prompt=prompt.system_prompt)
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import litellm
from litellm import completion, completion_cost

from patent_ranker.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
)
from patent_ranker.errors import EmptyResponse, ServiceError

# Suppress verbose LiteLLM logging
litellm.suppress_debug_info = True
litellm.drop_params = True

logger = logging.getLogger(__name__)


# =============================================================================
# MODEL REGISTRY - Costs and LiteLLM mapping
# =============================================================================

MODEL_GPT4O = "gpt-4o"
MODEL_GPT4O_MINI = "gpt-4o-mini"
MODEL_GPT41 = "gpt-4.1"
MODEL_GPT41_MINI = "gpt-4.1-mini"

MODEL_REGISTRY: dict[str, dict[str, Any]] = {
    MODEL_GPT4O: {
        "litellm_name": "gpt-4o",
        "provider": "openai",
        "cost_per_1m_input": 2.50,
        "cost_per_1m_output": 10.00,
        "context_window": 128_000,
        "supports_json_mode": True,
    },
    MODEL_GPT4O_MINI: {
        "litellm_name": "gpt-4o-mini",
        "provider": "openai",
        "cost_per_1m_input": 0.15,
        "cost_per_1m_output": 0.60,
        "context_window": 128_000,
        "supports_json_mode": True,
    },
    MODEL_GPT41: {
        "litellm_name": "gpt-4.1",
        "provider": "openai",
        "cost_per_1m_input": 2.00,
        "cost_per_1m_output": 8.00,
        "context_window": 1_000_000,
        "supports_json_mode": True,
    },
    MODEL_GPT41_MINI: {
        "litellm_name": "gpt-4.1-mini",
        "provider": "openai",
        "cost_per_1m_input": 0.40,
        "cost_per_1m_output": 1.60,
        "context_window": 1_000_000,
        "supports_json_mode": True,
    },
}

TRANSIENT_INDICATORS = [
    "rate limit",
    "ratelimit",
    "quota exceeded",
    "too many requests",
    "429",
    "502",
    "503",
    "overloaded",
    "temporarily",
]


# =============================================================================
# LLM RESPONSE WITH TRACKING
# =============================================================================


@dataclass
class LLMResponse:
    """Raw model text plus tracking metadata for one call."""

    text: str
    model: str
    provider: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    finish_reason: Optional[str] = None

    model_version: str = ""  # Fully qualified LiteLLM model name
    prompt_version: str = ""  # Version of the prompt template used
    prompt_hash: str = ""  # SHA256 of actual prompt sent
    timestamp: str = ""

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_log_record(self) -> dict[str, Any]:
        return {
            "model_version": self.model_version,
            "prompt_version": self.prompt_version,
            "prompt_hash": self.prompt_hash,
            "timestamp": self.timestamp,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cost_usd": self.cost_usd,
            "finish_reason": self.finish_reason,
            "response_length": len(self.text),
        }


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """
    Gateway to the scoring model.

    One instance can be shared by sequential chunk calls of a run; it holds
    configuration only, no per-call state.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: Provider API key
            model: Model name from MODEL_REGISTRY
            timeout_seconds: Request timeout; expiry surfaces as ServiceError
        """
        if not api_key:
            raise ValueError("LLMClient requires an API key; use mock mode when none is configured")
        if model not in MODEL_REGISTRY:
            raise ValueError(f"Unknown model: {model}. Available: {list(MODEL_REGISTRY.keys())}")

        self.api_key = api_key
        self.model_name = model
        self.model_config = MODEL_REGISTRY[model]
        self.timeout_seconds = timeout_seconds

        logger.info(f"LLM client initialized: {self.model_name}")

    @staticmethod
    def is_transient_error(error: Exception) -> bool:
        """Check if an error is a rate-limit/overload condition worth retrying later."""
        if isinstance(error, (litellm.RateLimitError, litellm.ServiceUnavailableError)):
            return True
        error_str = f"{type(error).__name__} {error}".lower()
        return any(indicator in error_str for indicator in TRANSIENT_INDICATORS)

    @staticmethod
    def compute_prompt_hash(prompt: str, system_prompt: Optional[str] = None) -> str:
        """SHA256 of the full prompt, truncated, for tracking."""
        full_prompt = f"{system_prompt or ''}|||{prompt}"
        return hashlib.sha256(full_prompt.encode()).hexdigest()[:16]

    def _build_kwargs(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> dict[str, Any]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": self.model_config["litellm_name"],
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "api_key": self.api_key,
            "timeout": self.timeout_seconds,
            "num_retries": 0,
        }
        if json_mode and self.model_config.get("supports_json_mode"):
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        json_mode: bool = True,
        prompt_version: Optional[str] = None,
    ) -> LLMResponse:
        """
        Run one completion.

        Args:
            prompt: User content (the JSON payload for scoring)
            system_prompt: System instructions
            temperature: Sampling temperature
            max_tokens: Output-token ceiling
            json_mode: Request a single JSON object
            prompt_version: Version string of the system prompt template

        Returns:
            LLMResponse with raw text and tracking metadata

        Raises:
            ServiceError: Transport, authorization, rate-limit or timeout failure
            EmptyResponse: Service returned no choices or empty content
        """
        kwargs = self._build_kwargs(prompt, system_prompt, temperature, max_tokens, json_mode)

        try:
            response = completion(**kwargs)
        except Exception as e:
            transient = self.is_transient_error(e)
            logger.error(
                f"LLM call failed with {self.model_name}: {type(e).__name__}: {e}"
                + (" (transient)" if transient else "")
            )
            raise ServiceError(
                f"LLM service call failed: {type(e).__name__}: {e}",
                model=self.model_name,
                transient=transient,
                details={"error_type": type(e).__name__},
            ) from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise EmptyResponse(
                f"LLM returned empty choices array (model {self.model_name}, "
                f"response {getattr(response, 'id', 'unknown')})",
                details={"model": self.model_name},
            )

        text = choices[0].message.content or ""
        if not text.strip():
            raise EmptyResponse(
                f"Empty response from {self.model_name}",
                details={"model": self.model_name, "finish_reason": choices[0].finish_reason},
            )

        input_tokens, output_tokens = self._token_counts(response)
        llm_response = LLMResponse(
            text=text,
            model=self.model_name,
            provider=self.model_config["provider"],
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self._cost(response, input_tokens, output_tokens),
            finish_reason=choices[0].finish_reason,
            model_version=self.model_config["litellm_name"],
            prompt_version=prompt_version or "",
            prompt_hash=self.compute_prompt_hash(prompt, system_prompt),
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata={"raw_response_id": getattr(response, "id", None)},
        )

        logger.debug(
            f"LLM call: {self.model_name} | "
            f"Tokens: {llm_response.input_tokens}->{llm_response.output_tokens} | "
            f"Cost: ${llm_response.cost_usd:.6f}"
        )
        if llm_response.finish_reason == "length":
            logger.warning(f"LLM output hit max_tokens={max_tokens}; response may be truncated")

        return llm_response

    @staticmethod
    def _token_counts(response: Any) -> tuple[int, int]:
        usage = getattr(response, "usage", None)
        if usage is None:
            return 0, 0
        return getattr(usage, "prompt_tokens", 0) or 0, getattr(usage, "completion_tokens", 0) or 0

    def _cost(self, response: Any, input_tokens: int, output_tokens: int) -> float:
        try:
            return completion_cost(completion_response=response)
        except Exception as e:
            # Registry pricing when LiteLLM has no price for the response
            logger.debug(f"completion_cost unavailable for {self.model_name}: {e}")
            return (input_tokens / 1_000_000) * self.model_config["cost_per_1m_input"] + (
                output_tokens / 1_000_000
            ) * self.model_config["cost_per_1m_output"]
