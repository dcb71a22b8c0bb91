"""
Tests for structured run logging.
"""

import json
import logging

import pytest

from tripdocs.progress.registry import RunRegistry
from tripdocs.shared.contracts.workflow import Run
from tripdocs.shared.logging import StructuredFormatter, log_run_transition, setup_logging


class TestRunTransitionLogging:
    """Tests for log_run_transition."""

    def test_context_attached(self, caplog):
        run = Run(id="run-1", status="running")

        with caplog.at_level(logging.INFO, logger="tripdocs.runs"):
            log_run_transition("step_recorded", run, extra={"step": "INIT"})

        record = caplog.records[-1]
        assert record.name == "tripdocs.runs"
        assert record.getMessage() == "[run=run-1] Run transition: step_recorded | status=running"
        assert record.context == {
            "event": "step_recorded",
            "run_id": "run-1",
            "status": "running",
            "steps": 0,
            "step": "INIT",
        }

    def test_failure_logged_as_warning(self, caplog):
        run = Run(id="run-2", status="failed", error="boom")

        with caplog.at_level(logging.INFO, logger="tripdocs.runs"):
            log_run_transition("run_failed", run, extra={"error": "boom"})

        assert caplog.records[-1].levelno == logging.WARNING

    def test_registry_logs_lifecycle(self, caplog):
        registry = RunRegistry()

        with caplog.at_level(logging.INFO, logger="tripdocs.runs"):
            run_id = registry.create_run(document_count=2)

        events = [r.context["event"] for r in caplog.records if r.name == "tripdocs.runs"]
        assert events == ["run_created"]
        assert caplog.records[-1].context["document_count"] == 2
        assert caplog.records[-1].context["run_id"] == run_id


class TestStructuredFormatter:
    """Tests for JSON-lines output."""

    def test_format(self):
        record = logging.LogRecord("tripdocs.x", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.context = {"run_id": "abc"}

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "tripdocs.x"
        assert entry["message"] == "hello world"
        assert entry["context"] == {"run_id": "abc"}
        assert "timestamp" in entry

    def test_setup_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "runs.log"
        logger = setup_logging(level="DEBUG", log_file=str(log_file), logger_name="tripdocs_test_json")

        log_run_transition("run_created", Run(id="run-3"), logger=logger)
        for handler in logger.handlers:
            handler.flush()

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert entries[-1]["context"]["event"] == "run_created"
        assert entries[-1]["context"]["run_id"] == "run-3"

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
