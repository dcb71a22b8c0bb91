"""Logging configuration and utilities."""

from tripdocs.shared.logging.config import setup_logging, log_run_transition, StructuredFormatter

__all__ = [
    "setup_logging",
    "log_run_transition",
    "StructuredFormatter",
]
