"""
Unit tests for logging configuration.
"""

import json
import logging

import pytest
import structlog

from layerpath.core.logging import configure_logging, get_logger, job_context


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True, handlers=[logging.NullHandler()])


@pytest.mark.unit
class TestLogging:
    """Tests for configure_logging and job_context."""

    def test_level(self):
        configure_logging(level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_quiet_loggers(self):
        configure_logging(level="DEBUG")
        assert logging.getLogger("compas").level == logging.WARNING

    def test_json_lines_carry_job_context(self, temp_dir):
        log_file = temp_dir / "run.log"
        configure_logging(level="INFO", json_output=True, log_file=str(log_file))

        with job_context("cylinder", step="slice"):
            get_logger("layerpath.test").info("slice_complete", layers=3)
        logging.getLogger("layerpath.plain").info("after %s", "context")
        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[0]["event"] == "slice_complete"
        assert records[0]["job"] == "cylinder"
        assert records[0]["step"] == "slice"
        assert records[0]["layers"] == 3
        assert records[1]["event"] == "after context"
        assert "job" not in records[1]
