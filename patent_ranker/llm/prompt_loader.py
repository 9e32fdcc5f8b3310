"""
Prompt loader with versioning and content hashing.

Prompts use a frontmatter format:
```
# PROMPT: prompt_name
# VERSION: 1.0.0
# LAST_UPDATED: 2025-11-27
# DESCRIPTION: Brief description
# ---PROMPT_START---
[actual prompt content, may contain $placeholders]
```

The hash is computed from content below the separator only, so the
(version, hash) pair identifies exactly which instructions the model saw.
Placeholders use string.Template syntax ($name) because prompt bodies
contain literal JSON braces.

Usage:
    from patent_ranker.llm.prompt_loader import load_prompt

    prompt = load_prompt("patent_scoring")
    text = prompt.render(weights_table="...", output_example="...")
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Optional

logger = logging.getLogger(__name__)

PROMPT_START_PATTERN = r"^#\s*---PROMPT_START---\s*$"


@dataclass(frozen=True)
class PromptInfo:
    """Loaded prompt with metadata."""

    name: str
    version: str
    content: str
    content_hash: str
    last_updated: Optional[str] = None
    description: Optional[str] = None
    file_path: Optional[str] = None

    def render(self, **values: str) -> str:
        """Substitute $placeholders. Missing values raise KeyError."""
        return Template(self.content).substitute(**values)


def compute_hash(content: str) -> str:
    """SHA256 of content, truncated to 16 chars."""
    return hashlib.sha256(content.strip().encode()).hexdigest()[:16]


def parse_frontmatter(text: str) -> tuple[dict[str, str], str]:
    """
    Split a prompt file into (metadata, content).

    Files without the separator are treated as content only.
    """
    match = re.search(PROMPT_START_PATTERN, text, re.MULTILINE)
    if not match:
        return {}, text.strip()

    metadata = {}
    for line in text[: match.start()].strip().splitlines():
        line_match = re.match(r"^#\s*(\w+):\s*(.+)$", line.strip())
        if line_match:
            metadata[line_match.group(1).lower()] = line_match.group(2).strip()

    return metadata, text[match.end() :].strip()


def get_prompts_dir() -> Path:
    return Path(__file__).parent / "prompts"


@lru_cache(maxsize=None)
def _load_prompt_cached(file_path: Path, name: str) -> PromptInfo:
    metadata, content = parse_frontmatter(file_path.read_text(encoding="utf-8"))
    info = PromptInfo(
        name=name,
        version=metadata.get("version", "0.0.0"),
        content=content,
        content_hash=compute_hash(content),
        last_updated=metadata.get("last_updated"),
        description=metadata.get("description"),
        file_path=str(file_path),
    )
    logger.debug(f"Loaded prompt {name} v{info.version} ({info.content_hash[:8]})")
    return info


def load_prompt(name: str, prompts_dir: Optional[Path] = None) -> PromptInfo:
    """
    Load a prompt file with version and hash tracking.

    Args:
        name: Prompt name (without .txt extension)
        prompts_dir: Optional custom prompts directory

    Returns:
        PromptInfo with metadata and content

    Raises:
        FileNotFoundError: If prompt file doesn't exist
    """
    file_path = (prompts_dir or get_prompts_dir()) / f"{name}.txt"
    if not file_path.exists():
        raise FileNotFoundError(f"Prompt file not found: {file_path}")
    return _load_prompt_cached(file_path.resolve(), name)


def clear_cache() -> None:
    """Drop cached prompts (tests that write temporary prompt files)."""
    _load_prompt_cached.cache_clear()
