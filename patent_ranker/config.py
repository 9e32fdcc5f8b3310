"""
Central configuration for the scoring engine.

Settings are read from environment variables (a local .env is loaded by the
CLI via python-dotenv). The only required-for-real-scoring value is the
credential; when it is absent the engine runs in deterministic mock mode,
which is a supported operating mode rather than an error.

Environment variables:
  - OPENAI_API_KEY                    (credential; absent => mock mode)
  - PATENT_RANKER_MODEL               (default: gpt-4o)
  - PATENT_RANKER_TEMPERATURE         (default: 0.2)
  - PATENT_RANKER_MAX_TOKENS          (default: 3000)
  - PATENT_RANKER_CHUNK_SIZE          (default: 2)
  - PATENT_RANKER_CHUNK_PAUSE_SECONDS (default: 0.5)
  - PATENT_RANKER_TIMEOUT_SECONDS     (default: 120)
  - PATENT_RANKER_RATE_LIMIT_RETRIES  (default: 0)
  - PATENT_RANKER_LOG_LEVEL           (default: INFO)
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from patent_ranker.constants import (
    DEFAULT_CHUNK_PAUSE_SECONDS,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_RATE_LIMIT_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
)
from patent_ranker.llm.llm_client import MODEL_REGISTRY

CREDENTIAL_ENV_VAR = "OPENAI_API_KEY"
ENV_PREFIX = "PATENT_RANKER_"


@dataclass(frozen=True)
class ScoringSettings:
    """Immutable settings for one orchestrator instance.

    Attributes:
        api_key: LLM credential, None selects mock mode
        model: Model name passed to the LLM gateway
        temperature: Sampling temperature for scoring calls
        max_tokens: Output-token ceiling per chunk call
        chunk_size: Patents per LLM call
        chunk_pause_seconds: Pause between consecutive chunks
        request_timeout_seconds: Gateway request timeout
        rate_limit_retries: Retries per chunk for transient service errors
        log_level: Logging level name for the CLI
    """

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_pause_seconds: float = DEFAULT_CHUNK_PAUSE_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    rate_limit_retries: int = DEFAULT_RATE_LIMIT_RETRIES
    log_level: str = "INFO"

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be in [0, 2], got {self.temperature}")
        if self.chunk_pause_seconds < 0:
            raise ValueError(f"chunk_pause_seconds must be >= 0, got {self.chunk_pause_seconds}")
        if self.request_timeout_seconds <= 0:
            raise ValueError(f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}")
        if self.rate_limit_retries < 0:
            raise ValueError(f"rate_limit_retries must be >= 0, got {self.rate_limit_retries}")
        if self.model not in MODEL_REGISTRY:
            raise ValueError(f"Unknown model: {self.model}. Available: {list(MODEL_REGISTRY.keys())}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def has_credential(self) -> bool:
        """True when real LLM scoring is configured."""
        return bool(self.api_key and self.api_key.strip())

    def with_overrides(self, **changes) -> "ScoringSettings":
        """Return a copy with the given fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _env_number(env: Mapping[str, str], name: str, cast, default):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> ScoringSettings:
    """
    Build settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        ScoringSettings with defaults for any unset variable

    Raises:
        ValueError: If a numeric variable cannot be parsed or is out of range
    """
    env = os.environ if env is None else env
    api_key = env.get(CREDENTIAL_ENV_VAR) or None

    return ScoringSettings(
        api_key=api_key,
        model=env.get(ENV_PREFIX + "MODEL") or DEFAULT_MODEL,
        temperature=_env_number(env, "TEMPERATURE", float, DEFAULT_TEMPERATURE),
        max_tokens=_env_number(env, "MAX_TOKENS", int, DEFAULT_MAX_TOKENS),
        chunk_size=_env_number(env, "CHUNK_SIZE", int, DEFAULT_CHUNK_SIZE),
        chunk_pause_seconds=_env_number(env, "CHUNK_PAUSE_SECONDS", float, DEFAULT_CHUNK_PAUSE_SECONDS),
        request_timeout_seconds=_env_number(env, "TIMEOUT_SECONDS", float, DEFAULT_REQUEST_TIMEOUT_SECONDS),
        rate_limit_retries=_env_number(env, "RATE_LIMIT_RETRIES", int, DEFAULT_RATE_LIMIT_RETRIES),
        log_level=(env.get(ENV_PREFIX + "LOG_LEVEL") or "INFO").upper(),
    )
