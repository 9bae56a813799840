"""
Tests for logging setup.
"""

import json
import logging

import pytest
from rich.logging import RichHandler

from telemost_recorder.utils.logging import InstanceLoggerAdapter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test handler configuration."""

    def test_console_handler(self, restore_root_logger):
        setup_logging("DEBUG")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0], RichHandler)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging("LOUD")
        assert restore_root_logger.level == logging.INFO

    def test_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "recorder.log"
        setup_logging("INFO", log_file=str(log_file))

        get_logger("telemost_recorder.test").info("Recording started")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "Recording started" in log_file.read_text(encoding="utf-8")

    def test_json_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "recorder.log"
        setup_logging("INFO", log_file=str(log_file), json_format=True)

        log = get_logger("telemost_recorder.test")
        log.warning('Page console [log]: said "hello"\nC:\\temp')
        try:
            raise ValueError("broken pipe")
        except ValueError:
            log.exception("Audio write failed")
        for handler in restore_root_logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        entries = [json.loads(line) for line in lines]

        assert len(entries) == 2
        assert entries[0]["level"] == "WARNING"
        assert entries[0]["name"] == "telemost_recorder.test"
        assert entries[0]["message"] == 'Page console [log]: said "hello"\nC:\\temp'
        assert "ValueError: broken pipe" in entries[1]["exception"]


class TestInstanceLoggerAdapter:
    def test_prefix(self, caplog):
        log = InstanceLoggerAdapter(logging.getLogger("telemost_recorder.test"), "a1b2c3")

        with caplog.at_level(logging.INFO):
            log.info("Joined conference")

        assert log.instance_id == "a1b2c3"
        assert "[a1b2c3] Joined conference" in caplog.text
