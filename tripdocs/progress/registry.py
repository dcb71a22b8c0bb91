"""
Run registry.

Process-wide, in-memory table of workflow runs. The registry exclusively
owns run and step state. Mutations of one run are serialized by that run's
own lock, so concurrent document tasks cannot interleave a step upsert;
different runs never contend. Every effective mutation is published to the
run's observer through the ProgressPublisher, in mutation order.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tripdocs.progress.publisher import (
    EndOfStream,
    ProgressPublisher,
    ProgressSubscription,
)
from tripdocs.shared.contracts.workflow import (
    CompletionUpdate,
    ProgressUpdate,
    Run,
    Step,
    now_ms,
)
from tripdocs.shared.logging.config import log_run_transition


logger = logging.getLogger(__name__)


class RunNotFoundError(KeyError):
    """Raised when a run id is not in the registry."""

    def __init__(self, run_id: str):
        super().__init__(run_id)
        self.run_id = run_id

    def __str__(self) -> str:
        return f"Run {self.run_id} not found"


@dataclass
class _RunEntry:
    run: Run
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class RunRegistry:
    """
    Owner of all run state for the life of the process.

    Returned Run objects are copies; only registry methods change state.
    """

    def __init__(self, publisher: Optional[ProgressPublisher] = None):
        self.publisher = publisher or ProgressPublisher()
        self._entries: Dict[str, _RunEntry] = {}

    def create_run(self, document_count: int = 0) -> str:
        """
        Register a new run in 'pending' state.

        Args:
            document_count: Number of input documents (informational)

        Returns:
            Fresh run identifier, unique for the life of the process
        """
        run_id = uuid.uuid4().hex
        while run_id in self._entries:
            run_id = uuid.uuid4().hex

        run = Run(id=run_id, document_count=document_count)
        self._entries[run_id] = _RunEntry(run=run)

        log_run_transition("run_created", run, extra={"document_count": document_count})
        return run_id

    async def record_step(self, run_id: str, step: Step) -> None:
        """
        Upsert a step by name and publish it.

        A step seen before is replaced in place, keeping its original
        position. The first 'running' step moves a pending run to 'running'.
        No-op for unknown or terminal runs.
        """
        entry = self._entries.get(run_id)
        if entry is None:
            logger.warning(f"[run={run_id}] record_step for unknown run | step={step.name}")
            return

        async with entry.lock:
            run = entry.run
            if run.is_terminal:
                logger.debug(
                    f"[run={run_id}] Ignoring step after terminal state | "
                    f"step={step.name}, status={run.status}"
                )
                return

            if step.status == "running" and run.status == "pending":
                run.status = "running"
            self._upsert_step(run, step)

    def _upsert_step(self, run: Run, step: Step) -> Step:
        """Replace-or-append a step by name, then log and publish it. Caller holds the lock."""
        recorded = step.model_copy(update={"timestamp": now_ms()})

        for idx, existing in enumerate(run.steps):
            if existing.name == recorded.name:
                run.steps[idx] = recorded
                break
        else:
            run.steps.append(recorded)

        log_run_transition(
            "step_recorded",
            run,
            extra={"step": recorded.name, "step_status": recorded.status, "message": recorded.message},
        )
        self.publisher.publish(run.id, ProgressUpdate(step=recorded.model_copy()))
        return recorded

    async def complete(self, run_id: str, warnings: List[str], markdown: str) -> None:
        """Mark a run completed with its warnings and rendered itinerary. No-op if terminal."""
        entry = self._entries.get(run_id)
        if entry is None:
            logger.warning(f"[run={run_id}] complete for unknown run")
            return

        async with entry.lock:
            run = entry.run
            if run.is_terminal:
                logger.debug(f"[run={run_id}] Ignoring complete after terminal state | status={run.status}")
                return

            run.status = "completed"
            run.warnings = list(warnings)
            run.markdown = markdown
            run.completed_at = now_ms()

            log_run_transition("run_completed", run, extra={"warnings": len(run.warnings)})
            self.publisher.publish(
                run_id, CompletionUpdate(warnings=list(run.warnings), markdown=markdown)
            )
            self.publisher.close(run_id)

    async def fail(self, run_id: str, message: str, failed_step: Optional[Step] = None) -> None:
        """
        Mark a run failed with an error message. No-op if terminal.

        Args:
            run_id: Run to fail
            message: Failure message stored on the run
            failed_step: Step to record as failed in the same critical section,
                so no concurrent step update can land between the two
        """
        entry = self._entries.get(run_id)
        if entry is None:
            logger.warning(f"[run={run_id}] fail for unknown run | error={message}")
            return

        async with entry.lock:
            run = entry.run
            if run.is_terminal:
                logger.debug(f"[run={run_id}] Ignoring fail after terminal state | status={run.status}")
                return

            if failed_step is not None:
                self._upsert_step(run, failed_step)

            run.status = "failed"
            run.error = message
            run.completed_at = now_ms()

            log_run_transition("run_failed", run, extra={"error": message})
            self.publisher.close(run_id, error=message)

    async def subscribe(self, run_id: str) -> ProgressSubscription:
        """
        Attach the single observer of a run's live updates.

        Observers only see updates from now on. If the run has already
        ended, the subscription carries just its terminal signal.

        Raises:
            RunNotFoundError: If the run does not exist
            ObserverAlreadyAttachedError: If the run already has an observer
        """
        entry = self._entries.get(run_id)
        if entry is None:
            raise RunNotFoundError(run_id)

        async with entry.lock:
            run = entry.run
            if not run.is_terminal:
                return self.publisher.subscribe(run_id)

            subscription = ProgressSubscription(self.publisher, run_id)
            if run.status == "completed":
                subscription.deliver(
                    CompletionUpdate(warnings=list(run.warnings or []), markdown=run.markdown or "")
                )
            else:
                subscription.deliver(EndOfStream(error=run.error))
            return subscription

    def get_run(self, run_id: str) -> Optional[Run]:
        entry = self._entries.get(run_id)
        if entry is None:
            return None
        return entry.run.model_copy(deep=True)

    def require_run(self, run_id: str) -> Run:
        """Like get_run, but raises RunNotFoundError for unknown ids."""
        run = self.get_run(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run

    def list_runs(self) -> List[Run]:
        return [entry.run.model_copy(deep=True) for entry in self._entries.values()]

    def clear(self) -> None:
        """Forget every run."""
        self._entries.clear()


# Process-wide registry (in-memory only; cleared on restart)
_registry: Optional[RunRegistry] = None


def get_registry() -> RunRegistry:
    """Get or create the shared registry instance."""
    global _registry
    if _registry is None:
        _registry = RunRegistry()
    return _registry
