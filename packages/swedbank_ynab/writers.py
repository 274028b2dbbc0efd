"""CSV output in the ledger's file-import layout.

Header ``Id,Date,Payee,Memo,Amount``; fields containing commas (amounts always
do) are double-quoted.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from os import PathLike
from pathlib import Path
from typing import TextIO

from .logging_setup import get_logger
from .models import LedgerEntry

CSV_HEADER: tuple[str, ...] = ("Id", "Date", "Payee", "Memo", "Amount")
DEFAULT_OUTPUT = "out.csv"

_logger = get_logger("swedbank_ynab.writers")


def _write(entries: Iterable[LedgerEntry], f: TextIO) -> int:
    writer = csv.writer(f, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    count = 0
    for entry in entries:
        writer.writerow(entry.as_row())
        count += 1
    return count


def write_ledger_csv(
    entries: Iterable[LedgerEntry], dest: str | PathLike[str] | TextIO = DEFAULT_OUTPUT
) -> int:
    """Write ``entries`` to a path or an open text stream; return the row count."""

    if isinstance(dest, (str, PathLike)):
        p = Path(dest)
        with p.open("w", encoding="utf-8", newline="") as f:
            count = _write(entries, f)
        _logger.info("wrote %d entr%s to %s", count, "y" if count == 1 else "ies", p)
        return count
    return _write(entries, dest)


__all__ = ["CSV_HEADER", "DEFAULT_OUTPUT", "write_ledger_csv"]
