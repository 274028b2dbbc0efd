"""Render resolved transactions as ledger entries.

Pure formatting: the bank's decimal comma is kept, debits get a leading ``-``
and dates become zero-padded ``DD/MM/YYYY``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from .models import Direction, LedgerEntry, ResolvedTransaction

DATE_FORMAT = "%d/%m/%Y"
DECIMAL_SEPARATOR = ","


def format_decimal(amount: Decimal) -> str:
    """``Decimal("1.5")`` → ``"1,50"``."""

    return f"{amount:.2f}".replace(".", DECIMAL_SEPARATOR)


def format_amount(amount: Decimal, direction: Direction) -> str:
    text = format_decimal(abs(amount))
    return f"-{text}" if direction is Direction.DEBIT else text


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def to_ledger_entry(resolved: ResolvedTransaction, entry_id: str) -> LedgerEntry:
    txn = resolved.transaction
    return LedgerEntry(
        id=entry_id,
        date=format_date(resolved.date),
        payee=resolved.payee,
        memo=resolved.memo,
        amount=format_amount(txn.amount, txn.direction),
        currency=txn.currency,
    )


__all__ = ["format_amount", "format_date", "format_decimal", "to_ledger_entry"]
