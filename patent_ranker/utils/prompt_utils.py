"""Prompt utilities for LLM interactions.

Patent evidence is pasted by users from external tools, so every field is
sanitized before it is embedded in a prompt payload.
"""

import re
from typing import Any

from patent_ranker.constants import MAX_EVIDENCE_CHARS

TRUNCATION_MARKER = "... [truncated]"

# Patterns that could break prompt boundaries or impersonate chat roles
_DANGEROUS_PATTERNS = [
    r"<\|.*?\|>",  # Special tokens like <|im_start|>
    r"\[INST\]|\[/INST\]",  # Llama instruction markers
    r"<<SYS>>|<</SYS>>",  # Llama system markers
    r"^\s*(?:system|assistant|user)\s*:",  # Role prefixes at line start
    r"\b(?:Human|Assistant):",  # Anthropic-style markers
]


def sanitize_for_prompt(text: Any, max_length: int = MAX_EVIDENCE_CHARS) -> str:
    """Sanitize text to prevent prompt injection.

    Removes chat-role and instruction markers and truncates excessively long
    content. Ordinary prose, including markdown, is left intact.

    Args:
        text: The text to sanitize (converted to string if not already)
        max_length: Maximum allowed length before truncation

    Returns:
        Sanitized string safe for embedding as an inert content field
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    result = text
    for pattern in _DANGEROUS_PATTERNS:
        result = re.sub(pattern, " ", result, flags=re.IGNORECASE | re.MULTILINE)

    result = result.strip()
    if len(result) > max_length:
        result = result[:max_length] + TRUNCATION_MARKER

    return result
