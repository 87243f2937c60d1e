"""Unit tests for CLI utilities."""

import logging

import pytest

from spicy import cli_utils
from spicy.cli_utils import ErrorFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    logger = logging.getLogger()
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_verbose_enables_debug(self, restore_root_logger):
        setup_logging(verbose=True)

        assert restore_root_logger.level == logging.DEBUG

    def test_default_is_warning(self, restore_root_logger):
        setup_logging(verbose=False)

        assert restore_root_logger.level == logging.WARNING

    def test_repeated_setup_replaces_handler(self, restore_root_logger):
        setup_logging()
        first = cli_utils._console_handler
        setup_logging(verbose=True)

        assert first not in restore_root_logger.handlers
        assert cli_utils._console_handler in restore_root_logger.handlers


class TestErrorFormatter:
    """Tests for ErrorFormatter."""

    def test_print_error_to_stderr(self, capsys):
        ErrorFormatter.print_error("Build failed!", "could not open spec: missing")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Build failed!" in captured.err
        assert "could not open spec: missing" in captured.err

    def test_print_success_to_stdout(self, capsys):
        ErrorFormatter.print_success("Build successful!")

        assert "Build successful!" in capsys.readouterr().out

    def test_usage_error_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_usage_error("missing argument: <spec>")

        assert exc_info.value.code == 1
        assert "missing argument" in capsys.readouterr().err
