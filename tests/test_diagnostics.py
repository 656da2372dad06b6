"""
Tests for the diagnostics logging bootstrap.
"""

import io
import logging

import pytest
from rich.console import Console

from logship.core.exceptions import DiagnosticsBootstrapFailure
from logship.diagnostics import (
    MAX_ARCHIVES,
    MAX_LOG_BYTES,
    OFF,
    TRACE,
    initialize,
    log_file_path,
    parse_level,
)


@pytest.fixture
def console_output():
    return io.StringIO()


@pytest.fixture
def console(console_output):
    return Console(file=console_output, width=200)


def read_log(handle) -> str:
    handle.file_handler.flush()
    return handle.log_file.read_text(encoding="utf-8")


class TestParseLevel:
    """Tests for level name parsing."""

    @pytest.mark.parametrize("name,expected", [
        ("trace", TRACE),
        ("Debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("Warning", logging.WARNING),
        ("error", logging.ERROR),
        ("fatal", logging.CRITICAL),
        ("off", OFF),
    ])
    def test_known_levels(self, name, expected):
        assert parse_level(name) == expected

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="verbose"):
            parse_level("verbose")


class TestInitialize:
    """Tests for initialize()."""

    def test_log_file_location(self, tmp_path, console):
        """Test the file lives at <dir>/logship/logship.log."""
        handle = initialize("info", tmp_path, console=console)

        assert handle.log_file == tmp_path / "logship" / "logship.log"
        assert handle.log_file == log_file_path(tmp_path)
        assert handle.log_file.parent.is_dir()

    def test_creates_missing_directories(self, tmp_path, console):
        handle = initialize("info", tmp_path / "a" / "b", console=console)
        logging.getLogger("logship.test").info("hello")
        assert "hello" in read_log(handle)

    def test_rotation_settings(self, tmp_path, console):
        """Test size based rotation, 5 MiB with 5 archives."""
        handle = initialize("info", tmp_path, console=console)

        assert handle.file_handler.maxBytes == MAX_LOG_BYTES == 5 * 1024 * 1024
        assert handle.file_handler.backupCount == MAX_ARCHIVES == 5

    def test_warning_gate(self, tmp_path, console, console_output):
        """Test a Warning gate drops Info from both targets while Error reaches both."""
        handle = initialize("Warning", tmp_path, console=console)
        log = logging.getLogger("logship.test")

        log.info("routine detail")
        log.error("something broke")

        file_text = read_log(handle)
        console_text = console_output.getvalue()

        assert "something broke" in file_text
        assert "something broke" in console_text
        assert "routine detail" not in file_text
        assert "routine detail" not in console_text

    def test_trace_reaches_console_only(self, tmp_path, console, console_output):
        """Test the console accepts TRACE while the file starts at DEBUG."""
        handle = initialize("trace", tmp_path, console=console)
        log = logging.getLogger("logship.test")

        log.log(TRACE, "fine grained")
        log.debug("debug detail")

        file_text = read_log(handle)
        assert "fine grained" in console_output.getvalue()
        assert "fine grained" not in file_text
        assert "debug detail" in file_text

    def test_off_silences_everything(self, tmp_path, console, console_output):
        handle = initialize("off", tmp_path, console=console)
        logging.getLogger("logship.test").critical("not shown")

        assert read_log(handle) == ""
        assert console_output.getvalue() == ""

    def test_reinitialize_replaces_handlers(self, tmp_path, console):
        """Test a second call does not stack handlers."""
        initialize("info", tmp_path / "first", console=console)
        second = initialize("debug", tmp_path / "second", console=console)

        logger = logging.getLogger("logship")
        assert logger.handlers == [second.console_handler, second.file_handler]
        assert logger.level == logging.DEBUG

    def test_close_detaches(self, tmp_path, console):
        handle = initialize("info", tmp_path, console=console)
        handle.close()
        assert handle.file_handler not in logging.getLogger("logship").handlers

    def test_root_handlers_do_not_repeat_records(self, tmp_path, console, console_output):
        """Test an embedding process's root handler does not get a second copy."""
        root_output = io.StringIO()
        root_handler = logging.StreamHandler(root_output)
        logging.getLogger().addHandler(root_handler)
        try:
            handle = initialize("info", tmp_path, console=console)
            logging.getLogger("logship.sinks").warning("only once")

            assert "only once" in console_output.getvalue()
            assert root_output.getvalue() == ""

            handle.close()
            assert logging.getLogger("logship").propagate
        finally:
            logging.getLogger().removeHandler(root_handler)

    def test_unusable_directory(self, tmp_path, console):
        """Test a log directory that cannot be created fails the bootstrap."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("occupied")

        with pytest.raises(DiagnosticsBootstrapFailure) as exc_info:
            initialize("info", blocker, console=console)

        assert exc_info.value.log_directory == str(blocker)

    def test_bad_level_rejected(self, tmp_path, console):
        with pytest.raises(ValueError):
            initialize("loud", tmp_path, console=console)
