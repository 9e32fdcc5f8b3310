"""
Logging setup for the scoring engine.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI calls
``configure_global_logging`` once at startup to install a unified
pipe-delimited format with millisecond timestamps. Logs go to stderr so the
ranked table / JSON on stdout stays clean.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S,%f"

# Chatty third-party loggers, capped at WARNING unless running at DEBUG
NOISY_LOGGERS = ["LiteLLM", "LiteLLM Router", "LiteLLM Proxy", "httpx", "httpcore", "openai", "urllib3"]


class MillisecondsFormatter(logging.Formatter):
    """Formatter that renders %f as 3-digit milliseconds."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            return ct.strftime(datefmt.replace(",%f", "")) + f",{int(record.msecs):03d}"
        if datefmt:
            return ct.strftime(datefmt)
        return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def _level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def configure_global_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger with the unified format.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_file: Optional file that additionally receives DEBUG-level output
    """
    level = _level(log_level)
    formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    third_party_level = level if level <= logging.DEBUG else logging.WARNING
    for lib_name in NOISY_LOGGERS:
        lib_logger = logging.getLogger(lib_name)
        lib_logger.handlers.clear()
        lib_logger.propagate = True
        lib_logger.setLevel(third_party_level)
