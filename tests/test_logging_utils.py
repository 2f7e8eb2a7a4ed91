"""Tests for root logger handler setup."""

import logging

import pytest

from common.logging_utils import add_file_handler, configure_logging


def _tagged(attr):
    return [h for h in logging.getLogger().handlers if getattr(h, attr, False)]


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if getattr(handler, "_peerfix", False) or getattr(handler, "_peerfix_file", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestConfigureLogging:
    """Test the stderr handler."""

    def test_repeated_calls_keep_one_handler(self):
        """Configuring twice leaves a single stderr handler."""
        configure_logging("INFO")
        configure_logging("DEBUG")
        assert len(_tagged("_peerfix")) == 1
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """An unknown level name falls back to INFO."""
        configure_logging("LOUD")
        assert logging.getLogger().level == logging.INFO


class TestAddFileHandler:
    """Test the log file mirror."""

    def test_repeated_calls_replace_the_handler(self, tmp_path):
        """A second log file replaces the first instead of stacking."""
        add_file_handler(str(tmp_path / "first.log"))
        add_file_handler(str(tmp_path / "second.log"))
        handlers = _tagged("_peerfix_file")
        assert len(handlers) == 1
        assert handlers[0].baseFilename == str(tmp_path / "second.log")

    def test_records_are_written(self, tmp_path):
        """Records reach the log file."""
        path = tmp_path / "run.log"
        logging.getLogger().setLevel(logging.INFO)
        add_file_handler(str(path))
        logging.getLogger("peerfix.test").warning("mirrored line")
        _tagged("_peerfix_file")[0].flush()
        assert "WARNING peerfix.test mirrored line" in path.read_text(encoding="utf-8")
