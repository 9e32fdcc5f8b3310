"""LLM access: gateway client, prompt building, and response schemas."""
