"""Pytest configuration for test isolation.

The CLI loads ``.env`` from the working directory and reads ``YNAB_*`` /
``SWEDBANK_YNAB_*`` variables. A developer's real settings must never leak
into tests (or reach the real API), so every test runs in its own temporary
working directory with those variables removed. Logging configured by a CLI
run is detached afterwards so later tests start from the library default.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from swedbank_ynab.logging_setup import reset_logging

_ENV_VARS = (
    "YNAB_TOKEN",
    "YNAB_BUDGET_ID",
    "YNAB_ACCOUNT_ID",
    "SWEDBANK_YNAB_CURRENCY",
    "SWEDBANK_YNAB_ENCODING",
    "SWEDBANK_YNAB_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    for name in _ENV_VARS:
        # setenv first so teardown also removes values loaded from a .env file
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield
    reset_logging()
