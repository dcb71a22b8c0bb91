"""
Run/progress engine.

The registry owns run and step state; the publisher streams every registry
mutation to the run's single observer.
"""

from tripdocs.progress.publisher import (
    ObserverAlreadyAttachedError,
    ProgressPublisher,
    ProgressSubscription,
)
from tripdocs.progress.registry import RunNotFoundError, RunRegistry, get_registry

__all__ = [
    "ObserverAlreadyAttachedError",
    "ProgressPublisher",
    "ProgressSubscription",
    "RunNotFoundError",
    "RunRegistry",
    "get_registry",
]
