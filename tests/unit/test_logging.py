"""Tests for logging setup."""

import logging

import pytest

from asteroidview.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_default_level_info(self):
        logger = setup_logging()
        assert logger.name == "asteroidview"
        assert logger.level == logging.INFO

    def test_verbose_enables_debug(self):
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_log_file_receives_records(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(log_file=log_file)
        logging.getLogger("asteroidview.nodes.viewer").info("Subscribing to: /camera/pose")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Subscribing to: /camera/pose" in log_file.read_text()

    def test_unwritable_log_file_warns(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        setup_logging(log_file=blocker / "run.log")
        assert "Could not setup file logging" in capsys.readouterr().err
        assert len(logging.getLogger().handlers) == 1
