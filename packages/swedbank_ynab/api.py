"""Statement → ledger conversion pipeline.

Stages run strictly in sequence over one statement:

1. parse rows (:mod:`swedbank_ynab.ingest.swedbank_csv`)
2. keep billable rows and merge fees (:mod:`swedbank_ynab.fees`)
3. resolve payees (:mod:`swedbank_ynab.payees`)
4. assign import ids (:mod:`swedbank_ynab.identity`)
5. filter by currency (:mod:`swedbank_ynab.currency`)
6. format ledger entries (:mod:`swedbank_ynab.formatter`)

Ids are assigned before the currency filter, so an entry's id does not depend
on which currency a run imports. All state (fee pointer, id counters) is local
to one call; concurrent calls share nothing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike

from .currency import normalize_currency, partition_by_currency
from .errors import EmptyStatement, StatementError
from .fees import merge_fees
from .formatter import to_ledger_entry
from .identity import assign_ids
from .ingest.swedbank_csv import DEFAULT_ENCODING, parse_statement, read_statement
from .logging_setup import get_logger
from .models import ConversionResult, RawRow, ResolvedTransaction
from .payees import resolve_all

_logger = get_logger("swedbank_ynab.api")


@dataclass(frozen=True, slots=True)
class _Identified:
    entry_id: str
    resolved: ResolvedTransaction

    @property
    def currency(self) -> str:
        return self.resolved.currency


def convert_statement(source: str | Iterable[str], *, currency: str) -> ConversionResult:
    """Convert statement text (or an iterable of its lines) to ledger entries.

    Raises
    ------
    MalformedRow
        When any line fails to parse. No entries are produced in that case.
    ValueError
        When ``currency`` is not a 3-letter code.
    """

    target = normalize_currency(currency)
    lines = source.splitlines(keepends=True) if isinstance(source, str) else source
    return _convert_rows(parse_statement(lines), target)


def _convert_rows(rows: list[RawRow], target: str) -> ConversionResult:
    if not rows:
        warning = EmptyStatement()
        _logger.warning("%s", warning)
        return ConversionResult(entries=(), warnings=(warning,))

    billable = [r for r in rows if r.is_transaction]
    non_transaction_rows = len(rows) - len(billable)

    merged = merge_fees(billable)
    resolved = resolve_all(merged.transactions)
    ids = assign_ids(merged.transactions)

    partition = partition_by_currency(
        (_Identified(entry_id=i, resolved=r) for i, r in zip(ids, resolved, strict=True)),
        target,
    )
    if partition.skipped_count:
        others = sorted({item.currency for item in partition.skipped})
        _logger.info(
            "skipped %d transaction(s) not in %s (%s)",
            partition.skipped_count,
            target,
            ", ".join(others),
        )

    entries = tuple(to_ledger_entry(item.resolved, item.entry_id) for item in partition.kept)
    warnings: tuple[StatementError, ...] = tuple(merged.warnings)
    _logger.info(
        "converted %d row(s) into %d %s entr%s",
        len(rows),
        len(entries),
        target,
        "y" if len(entries) == 1 else "ies",
    )
    return ConversionResult(
        entries=entries,
        skipped_currency=partition.skipped_count,
        non_transaction_rows=non_transaction_rows,
        warnings=warnings,
    )


def convert_file(
    path: str | PathLike[str], *, currency: str, encoding: str = DEFAULT_ENCODING
) -> ConversionResult:
    """Read a statement file and convert it; see :func:`convert_statement`."""

    target = normalize_currency(currency)
    _logger.debug("reading %s (%s)", path, encoding)
    return _convert_rows(read_statement(path, encoding=encoding), target)


__all__ = ["convert_file", "convert_statement"]
