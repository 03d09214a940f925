"""
Tests for logging configuration
"""

import logging
import sys

import orjson

from statusline.logging_config import setup_logging, log_performance, JSONFormatter, PACKAGE_LOGGER


class TestSetupLogging:

    def test_no_file_discards(self):
        logger = setup_logging("INFO")
        assert logger.name == PACKAGE_LOGGER
        assert logger.propagate is False
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "statusline.log"
        logger = setup_logging("DEBUG", log_file=log_file)
        logging.getLogger("statusline.widgets").debug("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_level_applied(self):
        assert setup_logging("error").level == logging.ERROR

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging("INFO", log_file=tmp_path / "a.log")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1


class TestJSONFormatter:

    def test_json_line(self, tmp_path):
        log_file = tmp_path / "structured.log"
        logger = setup_logging("DEBUG", log_file=log_file, json_format=True)
        log_performance(logging.getLogger("statusline.pipeline"), "widget.usage", 0.0123)
        for handler in logger.handlers:
            handler.flush()

        entry = orjson.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["level"] == "DEBUG"
        assert entry["logger"] == "statusline.pipeline"
        assert entry["extra"] == {"operation": "widget.usage", "duration_ms": 12.3}

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("statusline", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
        entry = orjson.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]
