"""Shared helpers: logging setup and prompt sanitization."""
