"""
Unit tests for src/utils/logging

Covers formatter output, credential masking, ContextLogger and root
logger setup.
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from src.utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    setup_logging,
    shutdown_logging,
)


def make_record(msg="hello", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="src.agent.runtime",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Test structured log output"""

    def test_basic_fields(self):
        """Each record is a single JSON object with the standard fields"""
        data = json.loads(JSONFormatter(app_name="etl-agent").format(make_record("[Poll] ok")))

        assert data["level"] == "INFO"
        assert data["logger"] == "src.agent.runtime"
        assert data["message"] == "[Poll] ok"
        assert data["app"] == "etl-agent"
        assert data["source"]["line"] == 10
        assert "timestamp" in data
        assert "hostname" in data

    def test_optional_fields_disabled(self):
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)
        data = json.loads(formatter.format(make_record()))

        assert "timestamp" not in data
        assert "hostname" not in data

    def test_context_and_masking(self):
        """Extra fields land in context; credential keys are masked"""
        record = make_record(job_id="j1", password="hunter2", api_key="k")

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"job_id": "j1", "password": "***", "api_key": "***"}
        assert "hunter2" not in JSONFormatter().format(record)

    def test_exception_info(self):
        try:
            raise ValueError("bad payload")
        except ValueError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad payload"

    def test_unserializable_extra(self):
        data = json.loads(JSONFormatter().format(make_record(when=object())))
        assert "object object" in data["context"]["when"]


class TestConsoleFormatter:
    """Test terminal log output"""

    def test_plain_format_with_context(self):
        formatter = ConsoleFormatter(use_colors=False)

        line = formatter.format(make_record("[Heartbeat] Sent", job_id="j1", token="abc"))

        assert "[INFO] src.agent.runtime: [Heartbeat] Sent" in line
        assert line.endswith("[job_id=j1, token=***]")

    def test_levelname_restored_after_coloring(self):
        formatter = ConsoleFormatter(use_colors=True)
        formatter.use_colors = True
        record = make_record()

        formatter.format(record)

        assert record.levelname == "INFO"


class TestContextLogger:
    """Test logger wrapper carrying job context"""

    def test_context_attached(self, caplog):
        log = ContextLogger("test.context", job_id="j1", job_type="fetch_metadata")

        with caplog.at_level(logging.INFO, logger="test.context"):
            log.info("[Job j1] Processing", attempt=2)

        record = caplog.records[-1]
        assert record.job_id == "j1"
        assert record.job_type == "fetch_metadata"
        assert record.attempt == 2

    def test_bind_does_not_mutate(self):
        log = ContextLogger("test.context", job_id="j1")

        bound = log.bind(job_type="etl_comparison")

        assert bound.get_context() == {"job_id": "j1", "job_type": "etl_comparison"}
        assert log.get_context() == {"job_id": "j1"}


class TestSetupLogging:
    """Test root logger configuration"""

    def test_console_and_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "agent.log"

        setup_logging(level="DEBUG", log_file=str(log_file), json_format=True)
        logging.getLogger("test.setup").info("[Agent] started")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert restore_root_logger.level == logging.DEBUG
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "[Agent] started"

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging(level="chatty", console_output=False)
        assert restore_root_logger.level == logging.INFO
        assert restore_root_logger.handlers == []

    def test_noisy_loggers_quieted(self, restore_root_logger):
        setup_logging(level="DEBUG", console_output=False)
        assert logging.getLogger("urllib3").level == logging.WARNING

    @patch("src.utils.logging.config.logging.shutdown")
    def test_shutdown_detaches_handlers(self, mock_shutdown, tmp_path, restore_root_logger):
        setup_logging(log_file=str(tmp_path / "agent.log"), console_output=False)

        shutdown_logging()

        assert restore_root_logger.handlers == []
        mock_shutdown.assert_called_once()

    def test_configure_from_env(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_CONSOLE", "false")
        monkeypatch.delenv("LOG_FILE", raising=False)

        configure_from_env()

        assert restore_root_logger.level == logging.ERROR
        assert restore_root_logger.handlers == []
