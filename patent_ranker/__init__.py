"""Patent ranker: LLM-backed weighted scoring of patents against a problem statement."""

__version__ = "0.1.0"
