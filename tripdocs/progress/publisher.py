"""
Progress publisher.

Delivers a run's Update events, in order, to at most one attached observer.
Each observer owns an unbounded queue; events published while no observer
is attached are dropped (there is no replay for late or reconnecting
observers). A run's stream ends after a completion event or a close.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from tripdocs.shared.contracts.workflow import CompletionUpdate, ProgressUpdate


logger = logging.getLogger(__name__)

Update = Union[ProgressUpdate, CompletionUpdate]


class ObserverAlreadyAttachedError(RuntimeError):
    """Raised when a second observer tries to attach to a run's stream."""

    def __init__(self, run_id: str):
        super().__init__(f"Run {run_id} already has an attached observer")
        self.run_id = run_id


@dataclass(frozen=True)
class EndOfStream:
    """Close marker; carries the failure message for failed runs."""

    error: Optional[str] = None


class ProgressSubscription:
    """
    The single observer of one run's updates.

    Iterate with ``async for``. Iteration stops after a CompletionUpdate or
    when the run's stream is closed; after a failure close, ``error`` holds
    the run's failure message.
    """

    def __init__(self, publisher: "ProgressPublisher", run_id: str):
        self.run_id = run_id
        self.error: Optional[str] = None
        self.finished = False
        self._publisher = publisher
        self._queue: "asyncio.Queue[Union[Update, EndOfStream]]" = asyncio.Queue()

    def deliver(self, item: Union[Update, EndOfStream]) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> "ProgressSubscription":
        return self

    async def __anext__(self) -> Update:
        if self.finished:
            raise StopAsyncIteration

        item = await self._queue.get()

        if isinstance(item, EndOfStream):
            self.error = item.error
            self._finish()
            raise StopAsyncIteration

        if isinstance(item, CompletionUpdate):
            self._finish()

        return item

    def unsubscribe(self) -> None:
        """Detach from the run; later events for it are dropped."""
        self._publisher.unsubscribe(self.run_id, self)

    def _finish(self) -> None:
        self.finished = True
        self.unsubscribe()

    async def __aenter__(self) -> "ProgressSubscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class ProgressPublisher:
    """Routes per-run updates to the run's single observer, if any."""

    def __init__(self):
        self._observers: Dict[str, ProgressSubscription] = {}

    def subscribe(self, run_id: str) -> ProgressSubscription:
        """
        Attach the observer for a run.

        Raises:
            ObserverAlreadyAttachedError: If the run already has an observer
        """
        if run_id in self._observers:
            raise ObserverAlreadyAttachedError(run_id)

        subscription = ProgressSubscription(self, run_id)
        self._observers[run_id] = subscription
        logger.info(f"[run={run_id}] [publisher] Observer attached")
        return subscription

    def unsubscribe(self, run_id: str, subscription: ProgressSubscription) -> None:
        if self._observers.get(run_id) is subscription:
            del self._observers[run_id]
            logger.info(f"[run={run_id}] [publisher] Observer detached")

    def has_observer(self, run_id: str) -> bool:
        return run_id in self._observers

    def publish(self, run_id: str, update: Update) -> bool:
        """
        Deliver an update to the run's observer.

        Returns:
            True if an observer received it, False if it was dropped
        """
        subscription = self._observers.get(run_id)
        if subscription is None:
            logger.debug(f"[run={run_id}] [publisher] No observer, dropping {update.type} update")
            return False

        subscription.deliver(update)
        return True

    def close(self, run_id: str, error: Optional[str] = None) -> None:
        """End the run's stream; the observer, if any, is detached."""
        subscription = self._observers.pop(run_id, None)
        if subscription is not None:
            subscription.deliver(EndOfStream(error=error))
            logger.info(
                f"[run={run_id}] [publisher] Stream closed | failed={error is not None}"
            )
