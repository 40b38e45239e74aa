"""
Tests for logging setup.
"""

from __future__ import annotations

import logging
import sys

from genprotos.core.observability.logging_config import setup_logging, setup_logging_from_env


class TestSetupLogging:
    def test_console_on_stderr(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr
        assert root.level == logging.INFO

    def test_unknown_level_falls_back(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "gen.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("genprotos.test").debug("to file only")
        for handler in root.handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("GENPROTOS_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("GENPROTOS_LOG_FILE", raising=False)
        setup_logging_from_env()
        assert logging.getLogger().level == logging.DEBUG

    def test_flag_beats_env(self, monkeypatch):
        monkeypatch.setenv("GENPROTOS_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("GENPROTOS_LOG_FILE", raising=False)
        setup_logging_from_env("ERROR")
        assert logging.getLogger().level == logging.ERROR
