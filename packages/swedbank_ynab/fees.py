"""Fold bank commission rows and loan repayment lines into one transaction.

The bank books a transfer fee as a separate ``KOM`` line right after the
payment it belongs to. The ledger should see one outflow of ``payment + fee``
instead of two entries. A loan repayment is booked as consecutive ``AZA``
lines (principal, interest, ...) that likewise become one ledger entry.

Matching policy
---------------
- A fee attaches to the nearest preceding principal in the same settlement
  batch: the contiguous run of rows with the fee's account and settlement
  date. Scanning stops at the first row outside that run.
- The principal must have the fee's direction and currency; amounts are added
  as-is and are never converted.
- Any number of fees may attach to one principal.
- A fee with no eligible principal is emitted as its own transaction and an
  :class:`~swedbank_ynab.errors.UnrecognizedFeeContext` diagnostic is recorded.
- An ``AZA`` line rolls up into the batch's latest transaction when that one
  is also a loan repayment with the same direction and currency. Otherwise it
  starts a new loan repayment. Fees may attach to a rolled-up repayment.

Output order always follows the principals' input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .errors import UnrecognizedFeeContext
from .logging_setup import get_logger
from .models import RawRow, Transaction

FEE_PAYMENT_METHODS: frozenset[str] = frozenset({"KOM"})
LOAN_REPAYMENT_METHODS: frozenset[str] = frozenset({"AZA"})

_logger = get_logger("swedbank_ynab.fees")


def is_fee(row: RawRow) -> bool:
    return row.is_transaction and row.payment_method in FEE_PAYMENT_METHODS


def is_loan_repayment(row: RawRow) -> bool:
    return row.is_transaction and row.payment_method in LOAN_REPAYMENT_METHODS


@dataclass(frozen=True, slots=True)
class FeeMergeResult:
    transactions: tuple[Transaction, ...]
    warnings: tuple[UnrecognizedFeeContext, ...] = ()


def _same_batch(a: RawRow, b: RawRow) -> bool:
    return a.account == b.account and a.date == b.date


def _can_fold(txn: Transaction, row: RawRow) -> bool:
    return txn.direction is row.direction and txn.currency == row.currency


def merge_fees(rows: Iterable[RawRow]) -> FeeMergeResult:
    """Merge fee rows and loan repayment lines; return the billable sequence."""

    merged: list[Transaction] = []
    warnings: list[UnrecognizedFeeContext] = []
    # Indexes into ``merged`` for the current settlement batch, oldest first.
    batch: list[int] = []
    batch_key: RawRow | None = None

    for row in rows:
        if batch_key is None or not _same_batch(batch_key, row):
            batch = []
            batch_key = row

        if is_loan_repayment(row):
            if batch:
                last = merged[batch[-1]]
                if is_loan_repayment(last.principal) and _can_fold(last, row):
                    _logger.debug(
                        "line %d: loan repayment part %s rolled into line %d",
                        row.line_number,
                        row.amount,
                        last.principal.line_number,
                    )
                    merged[batch[-1]] = last.with_part(row)
                    continue
            batch.append(len(merged))
            merged.append(Transaction(principal=row))
            continue

        if not is_fee(row):
            batch.append(len(merged))
            merged.append(Transaction(principal=row))
            continue

        target = next(
            (
                i
                for i in reversed(batch)
                if not is_fee(merged[i].principal) and _can_fold(merged[i], row)
            ),
            None,
        )
        if target is None:
            warning = UnrecognizedFeeContext(row.line_number, row.amount, row.date)
            _logger.warning("%s", warning)
            warnings.append(warning)
            batch.append(len(merged))
            merged.append(Transaction(principal=row))
            continue

        _logger.debug(
            "line %d: fee %s merged into line %d",
            row.line_number,
            row.amount,
            merged[target].principal.line_number,
        )
        merged[target] = merged[target].with_fee(row)

    return FeeMergeResult(transactions=tuple(merged), warnings=tuple(warnings))


__all__ = [
    "FEE_PAYMENT_METHODS",
    "FeeMergeResult",
    "LOAN_REPAYMENT_METHODS",
    "is_fee",
    "is_loan_repayment",
    "merge_fees",
]
