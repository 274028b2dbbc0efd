"""Data models for the statement → ledger pipeline.

Each stage produces a new immutable value and hands it to the next one:

``RawRow`` (parser) → ``Transaction`` (fee merger) → ``ResolvedTransaction``
(payee resolver) → ``LedgerEntry`` (formatter).

Amounts are ``Decimal`` throughout; nothing is converted to ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from .errors import EmptyStatement, StatementError

# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------


class Direction(str, Enum):
    """Debit/credit flag as exported by the bank (``D`` out, ``K`` in)."""

    DEBIT = "D"
    CREDIT = "K"


class RecordType(str, Enum):
    """Statement record type (second column)."""

    START_BALANCE = "10"
    TRANSACTION = "20"
    TURNOVER = "82"
    END_BALANCE = "86"
    INTEREST = "900"


# ---------------------------------------------------------------------------
# Pipeline values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawRow:
    """One statement line, typed but otherwise uninterpreted.

    ``amount`` is the unsigned source amount; the sign lives in ``direction``.
    ``line_number`` is the 1-based physical line in the input file.
    """

    account: str
    record_type: RecordType
    date: date
    counterparty: str
    description: str
    amount: Decimal
    currency: str
    direction: Direction
    archive_code: str
    payment_method: str
    reference: str = ""
    document_number: str = ""
    line_number: int = 0

    @property
    def is_transaction(self) -> bool:
        return self.record_type is RecordType.TRANSACTION


@dataclass(frozen=True, slots=True)
class Transaction:
    """A principal row together with the rows folded into it.

    ``fees`` are commission rows charged for the principal. ``parts`` are the
    further lines of a loan repayment whose first line is the principal.
    Folded rows always share the principal's direction and currency, so
    ``amount`` is a plain sum and ``direction`` is the principal's.
    """

    principal: RawRow
    fees: tuple[RawRow, ...] = ()
    parts: tuple[RawRow, ...] = ()

    @property
    def amount(self) -> Decimal:
        folded = (r.amount for r in (*self.parts, *self.fees))
        return self.principal.amount + sum(folded, Decimal("0"))

    @property
    def direction(self) -> Direction:
        return self.principal.direction

    @property
    def currency(self) -> str:
        return self.principal.currency

    @property
    def date(self) -> date:
        return self.principal.date

    @property
    def account(self) -> str:
        return self.principal.account

    def with_fee(self, fee: RawRow) -> Transaction:
        return replace(self, fees=(*self.fees, fee))

    def with_part(self, part: RawRow) -> Transaction:
        return replace(self, parts=(*self.parts, part))


@dataclass(frozen=True, slots=True)
class ResolvedTransaction:
    """A transaction with its payee, memo and effective (ledger) date."""

    transaction: Transaction
    payee: str
    memo: str
    date: date

    def __post_init__(self) -> None:
        if not self.payee.strip():
            raise StatementError(
                f"line {self.transaction.principal.line_number}: resolved payee is empty"
            )

    @property
    def currency(self) -> str:
        return self.transaction.currency


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Terminal output row.

    ``date`` is ``DD/MM/YYYY`` and ``amount`` keeps the bank's decimal comma
    with a leading ``-`` for debits. ``currency`` is informational and is not
    part of the CSV output.
    """

    id: str
    date: str
    payee: str
    memo: str
    amount: str
    currency: str = ""

    def as_row(self) -> tuple[str, str, str, str, str]:
        return (self.id, self.date, self.payee, self.memo, self.amount)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of converting one statement.

    Every data row is accounted for: it is either part of ``entries`` (alone
    or merged as a fee), counted in ``skipped_currency``, or counted in
    ``non_transaction_rows`` (balance/turnover/interest lines).
    """

    entries: tuple[LedgerEntry, ...]
    skipped_currency: int = 0
    non_transaction_rows: int = 0
    warnings: tuple[StatementError, ...] = ()

    @property
    def empty(self) -> bool:
        return any(isinstance(w, EmptyStatement) for w in self.warnings)


__all__ = [
    "ConversionResult",
    "Direction",
    "LedgerEntry",
    "RawRow",
    "RecordType",
    "ResolvedTransaction",
    "Transaction",
]
