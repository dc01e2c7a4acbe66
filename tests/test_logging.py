"""Tests for logging configuration."""

import logging

import pytest

from withlockfile.logging import LogLevel, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, LogLevel.QUIET),
            ({"verbosity": 1}, LogLevel.VERBOSE),
            ({"verbosity": 2}, LogLevel.DEBUG),
            ({"debug": True}, LogLevel.DEBUG),
            ({"quiet": True, "debug": True, "verbosity": 2}, LogLevel.SILENT),
        ],
    )
    def test_level_precedence(self, kwargs: dict, expected: LogLevel) -> None:
        configure_logging(**kwargs)
        assert logging.getLogger().level == expected

    def test_console_writes_to_stderr(self) -> None:
        console = configure_logging(no_color=True)
        assert console.stderr
        assert console.no_color
