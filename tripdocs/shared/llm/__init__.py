"""LLM client utilities."""

from tripdocs.shared.llm.client import get_cached_client, call_llm, get_llm_response

__all__ = ["get_cached_client", "call_llm", "get_llm_response"]
