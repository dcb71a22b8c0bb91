"""
Structured logging configuration.

JSON-lines output for workflow run transitions, so the lifecycle of every
run can be reconstructed from the log alone.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from tripdocs.shared.contracts.workflow import Run


RUN_LOGGER_NAME = "tripdocs.runs"

# Run events logged above INFO
_EVENT_LEVELS = {
    "run_failed": logging.WARNING,
}


class StructuredFormatter(logging.Formatter):
    """
    Formats each record as one JSON object.

    Keys: timestamp (UTC, ISO 8601), level, logger, message, plus
    `context` when the record carries run context and `exception` when
    it carries exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context is not None:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "tripdocs",
) -> logging.Logger:
    """
    Route a logger tree to JSON-lines handlers.

    Replaces any handlers already on the logger and stops propagation to
    the root logger, so records are not also printed in the plain format.

    Args:
        level: Logging level or level name
        log_file: Also append to this file when given
        logger_name: Root of the logger tree to configure

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = StructuredFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def log_run_transition(
    event: str,
    run: "Run",
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a run lifecycle event with a summary of the run.

    Args:
        event: Event name ("run_created", "step_recorded", "run_completed", "run_failed")
        run: The run after the transition
        extra: Event-specific fields
        logger: Defaults to the "tripdocs.runs" logger
    """
    if logger is None:
        logger = logging.getLogger(RUN_LOGGER_NAME)

    context: Dict[str, Any] = {
        "event": event,
        "run_id": run.id,
        "status": run.status,
        "steps": len(run.steps),
    }
    if extra:
        context.update(extra)

    level = _EVENT_LEVELS.get(event, logging.INFO)
    logger.log(
        level,
        f"[run={run.id}] Run transition: {event} | status={run.status}",
        extra={"context": context},
    )
