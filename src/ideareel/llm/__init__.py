"""LLM completion backends."""
