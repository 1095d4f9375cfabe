"""로깅 설정 단위 테스트."""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from flowtagger.utils.config import Config
from flowtagger.utils.logging_setup import LOG_FILE_NAME, JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def _reset_flowtagger_logger():
    yield
    root = logging.getLogger("flowtagger")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_console_and_file_handlers(self, tmp_path: Path):
        config = Config.defaults().with_overrides({
            "logging.directory": str(tmp_path / "logs"),
            "logging.level": "debug",
        })
        root = setup_logging(config)
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        assert (tmp_path / "logs").is_dir()

        logging.getLogger("flowtagger.test").info("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in (tmp_path / "logs" / LOG_FILE_NAME).read_text()

    def test_null_directory_disables_file_handler(self):
        config = Config.defaults().with_overrides({})
        config.raw["logging"]["directory"] = None
        root = setup_logging(config)
        assert len(root.handlers) == 1
        assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path):
        config = Config.defaults().with_overrides({"logging.directory": str(tmp_path)})
        setup_logging(config)
        root = setup_logging(config)
        assert len(root.handlers) == 2

    def test_json_format(self, tmp_path: Path):
        config = Config.defaults().with_overrides({
            "logging.directory": str(tmp_path),
            "logging.format": "json",
        })
        root = setup_logging(config)
        assert all(isinstance(h.formatter, JSONFormatter) for h in root.handlers)


class TestJSONFormatter:
    def test_format_fields(self):
        record = logging.LogRecord(
            "flowtagger.x", logging.WARNING, __file__, 1, "count=%d", (3,), None,
        )
        data = json.loads(JSONFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "flowtagger.x"
        assert data["msg"] == "count=3"
        assert "exception" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "flowtagger.x", logging.ERROR, __file__, 1, "failed", (), exc_info,
        )
        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]
