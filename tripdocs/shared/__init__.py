"""Shared contracts, configuration, LLM access and logging."""
