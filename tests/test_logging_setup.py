import io
import logging

import pytest

from swedbank_ynab.logging_setup import (
    LOG_LEVEL_ENV,
    PACKAGE_LOGGER,
    configure_logging,
    get_logger,
    resolve_level,
)


@pytest.mark.parametrize(
    ("level", "verbose", "expected"),
    [
        (None, 0, logging.INFO),
        (None, 1, logging.DEBUG),
        ("warning", 0, logging.WARNING),
        (" Error ", 0, logging.ERROR),
        ("15", 0, 15),
        (logging.CRITICAL, 2, logging.CRITICAL),
        ("not-a-level", 0, logging.INFO),
    ],
)
def test_resolve_level(level, verbose: int, expected: int):
    assert resolve_level(level, verbose=verbose) == expected


def test_environment_level_applies_without_flags(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")

    assert resolve_level() == logging.DEBUG
    assert resolve_level("error") == logging.ERROR


def test_library_loggers_are_silent_until_configured():
    get_logger("swedbank_ynab.test")

    pkg = logging.getLogger(PACKAGE_LOGGER)
    assert any(isinstance(h, logging.NullHandler) for h in pkg.handlers)


def test_configure_installs_one_handler():
    stream = io.StringIO()

    configure_logging("INFO", stream=stream, fmt="%(levelname)s %(name)s: %(message)s")
    configure_logging("DEBUG", stream=io.StringIO())
    get_logger("swedbank_ynab.fees").debug("merged %d fee(s)", 2)

    pkg = logging.getLogger(PACKAGE_LOGGER)
    stream_handlers = [h for h in pkg.handlers if isinstance(h, logging.StreamHandler)]
    assert len(stream_handlers) == 1
    assert not pkg.propagate
    assert stream.getvalue() == "DEBUG swedbank_ynab.fees: merged 2 fee(s)\n"


def test_records_below_level_are_dropped():
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)

    get_logger("swedbank_ynab.api").info("quiet")

    assert stream.getvalue() == ""
