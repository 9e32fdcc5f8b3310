"""
Global constants for patent scoring configuration.

Centralizes magic numbers and configuration values used throughout
the scoring engine for easier maintenance and tuning.
"""

# Batch Limits
MIN_DOCUMENTS_PER_BATCH = 1
MAX_DOCUMENTS_PER_BATCH = 5

# Chunking
DEFAULT_CHUNK_SIZE = 2  # Patents per LLM call, keeps each call within token limits
DEFAULT_CHUNK_PAUSE_SECONDS = 0.5  # Pause between chunks for progress pacing

# LLM Call Settings
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 3000  # Conservative ceiling sized for a 1-2 patent chunk
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120

# Rate-limit retry (per chunk, transient service errors only)
DEFAULT_RATE_LIMIT_RETRIES = 0  # 0 = a failed chunk call aborts the run
RATE_LIMIT_INITIAL_BACKOFF_SECONDS = 5.0  # Doubles each retry: 5s, 10s, 20s

# Score Bounds
MIN_CATEGORY_SCORE = 0
MAX_CATEGORY_SCORE = 100

# Reconciliation
PLACEHOLDER_SCORE = 25  # Penalized score for patents the model skipped
PLACEHOLDER_RATIONALE = "Analysis incomplete — not fully processed."

# Mock Scorer
MOCK_BASE_SCORE = 40
MOCK_BASE_SPREAD = 40  # base in [40, 79]
MOCK_VARIATION_STEP = 7
MOCK_VARIATION_SPREAD = 30  # variation in [-15, 14]
MOCK_MIN_SCORE = 10
MOCK_MAX_SCORE = 90

# Rationale strength thresholds (mock scorer wording)
STRONG_SCORE_THRESHOLD = 70
MODERATE_SCORE_THRESHOLD = 50

# Prompt sanitization
MAX_EVIDENCE_CHARS = 8000  # Per evidence field before truncation
