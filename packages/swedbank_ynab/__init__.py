"""Public interface for the ``swedbank_ynab`` package.

Re-exports the conversion entry points, the pipeline value types and the
error types. The CLI lives in :mod:`swedbank_ynab.cli` and the YNAB client in
:mod:`swedbank_ynab.ynab_client`.
"""

from .api import convert_file, convert_statement
from .errors import (
    EmptyStatement,
    LedgerApiError,
    MalformedRow,
    StatementError,
    UnrecognizedFeeContext,
)
from .models import (
    ConversionResult,
    Direction,
    LedgerEntry,
    RawRow,
    RecordType,
    ResolvedTransaction,
    Transaction,
)
from .writers import write_ledger_csv

__all__ = [
    # API
    "convert_file",
    "convert_statement",
    "write_ledger_csv",
    # Models
    "ConversionResult",
    "Direction",
    "LedgerEntry",
    "RawRow",
    "RecordType",
    "ResolvedTransaction",
    "Transaction",
    # Errors and diagnostics
    "EmptyStatement",
    "LedgerApiError",
    "MalformedRow",
    "StatementError",
    "UnrecognizedFeeContext",
]
