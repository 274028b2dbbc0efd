"""Exception and diagnostic types for statement conversion.

``MalformedRow`` is fatal: fee matching depends on row positions, so a single
unparsable line fails the whole run. ``UnrecognizedFeeContext`` and
``EmptyStatement`` are diagnostics. The pipeline never raises them; it
collects instances in :attr:`swedbank_ynab.models.ConversionResult.warnings`
so callers can log or display them.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal


class StatementError(Exception):
    """Base class for statement conversion problems."""


class MalformedRow(StatementError, ValueError):
    """A statement line could not be parsed.

    Attributes
    ----------
    line_number:
        1-based physical line number in the statement file.
    field:
        Name of the offending field (``"fields"`` for a field-count mismatch).
    value:
        The raw value that failed to parse (``None`` when not applicable).
    reason:
        Short human-readable explanation.
    """

    def __init__(
        self, line_number: int, field: str, reason: str, value: str | None = None
    ) -> None:
        self.line_number = line_number
        self.field = field
        self.value = value
        self.reason = reason
        detail = f"line {line_number}: {field}: {reason}"
        if value is not None:
            detail += f" ({value!r})"
        super().__init__(detail)


class UnrecognizedFeeContext(StatementError):
    """A fee row had no eligible principal and was kept as its own transaction."""

    def __init__(self, line_number: int, amount: Decimal, on: date) -> None:
        self.line_number = line_number
        self.amount = amount
        self.date = on
        super().__init__(
            f"line {line_number}: fee {amount} on {on:%d.%m.%Y} has no matching "
            "transaction; imported on its own"
        )


class EmptyStatement(StatementError):
    """The statement contained no data rows after the header."""

    def __init__(self) -> None:
        super().__init__("statement has no data rows")


class LedgerApiError(Exception):
    """The ledger API returned an error response or an unreadable body."""

    def __init__(self, status: int | None, detail: str) -> None:
        self.status = status
        self.detail = detail
        prefix = f"HTTP {status}" if status is not None else "request failed"
        super().__init__(f"YNAB API error: {prefix}: {detail}")


__all__ = [
    "EmptyStatement",
    "LedgerApiError",
    "MalformedRow",
    "StatementError",
    "UnrecognizedFeeContext",
]
