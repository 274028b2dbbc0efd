"""Row parser for Swedbank semicolon-delimited statement exports.

Column order (LV header names shown; EE/LT exports use the same order):

``Klienta konts; Ieraksta tips; Datums; Saņēmējs/Maksātājs;
Informācija saņēmējam; Summa; Valūta; Debets/Kredīts; Arhīva kods;
Maksājuma veids; Refernces numurs; Dokumenta numurs``

Every line ends with a terminating ``;``, which the ``csv`` reader reports as
a trailing empty field. Amounts use a decimal comma and are always unsigned;
the sign comes from the debit/credit column.

Any line that does not parse raises :class:`~swedbank_ynab.errors.MalformedRow`
naming the physical line number. Nothing is returned for a partially parsed
statement.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from os import PathLike
from pathlib import Path

from ..errors import MalformedRow
from ..logging_setup import get_logger
from ..models import Direction, RawRow, RecordType

DELIMITER = ";"
QUOTECHAR = '"'
FIELD_COUNT = 12

# Windows Baltic code page used by the bank's "Latin" export option.
DEFAULT_ENCODING = "cp1257"

# First-column values that identify the header line, per export language.
HEADER_SENTINELS: frozenset[str] = frozenset(
    {
        "Klienta konts",
        "Kliendi konto",
        "Kliento sąskaita",
        "Client account",
    }
)

FIELD_NAMES: tuple[str, ...] = (
    "account",
    "record_type",
    "date",
    "counterparty",
    "description",
    "amount",
    "currency",
    "direction",
    "archive_code",
    "payment_method",
    "reference",
    "document_number",
)

_AMOUNT_RE = re.compile(r"^\d+(?:,\d{1,2})?$")
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")
_CENTS = Decimal("0.01")

_logger = get_logger("swedbank_ynab.ingest.swedbank_csv")


def parse_amount(raw: str, *, line_number: int = 0) -> Decimal:
    """Parse an unsigned decimal-comma amount (``"10,65"``) as fixed point."""

    s = raw.strip()
    if not _AMOUNT_RE.fullmatch(s):
        raise MalformedRow(line_number, "amount", "not an unsigned decimal-comma amount", raw)
    return Decimal(s.replace(",", ".")).quantize(_CENTS)


def parse_date(raw: str, *, line_number: int = 0) -> date:
    """Parse a ``DD.MM.YYYY`` statement date."""

    try:
        return datetime.strptime(raw.strip(), "%d.%m.%Y").date()
    except ValueError as exc:
        raise MalformedRow(line_number, "date", "expected DD.MM.YYYY", raw) from exc


def is_header(fields: Sequence[str]) -> bool:
    return bool(fields) and fields[0].strip().lstrip("\ufeff") in HEADER_SENTINELS


def parse_row(fields: Sequence[str], line_number: int) -> RawRow:
    """Decode one split statement line into a :class:`RawRow`."""

    values = list(fields)
    if len(values) == FIELD_COUNT + 1 and values[-1].strip() == "":
        values.pop()
    if len(values) != FIELD_COUNT:
        raise MalformedRow(
            line_number, "fields", f"expected {FIELD_COUNT} fields, got {len(values)}"
        )
    row = dict(zip(FIELD_NAMES, (v.strip() for v in values), strict=True))

    try:
        record_type = RecordType(row["record_type"])
    except ValueError as exc:
        raise MalformedRow(
            line_number, "record_type", "unknown record type", row["record_type"]
        ) from exc
    try:
        direction = Direction(row["direction"])
    except ValueError as exc:
        raise MalformedRow(
            line_number, "direction", "expected D or K", row["direction"]
        ) from exc
    if not _CURRENCY_RE.fullmatch(row["currency"]):
        raise MalformedRow(line_number, "currency", "expected a 3-letter code", row["currency"])

    return RawRow(
        account=row["account"],
        record_type=record_type,
        date=parse_date(row["date"], line_number=line_number),
        counterparty=row["counterparty"],
        description=row["description"],
        amount=parse_amount(row["amount"], line_number=line_number),
        currency=row["currency"].upper(),
        direction=direction,
        archive_code=row["archive_code"],
        payment_method=row["payment_method"].upper(),
        reference=row["reference"],
        document_number=row["document_number"],
        line_number=line_number,
    )


def parse_statement(lines: Iterable[str]) -> list[RawRow]:
    """Parse statement text lines (header included) into rows, in file order.

    Blank lines and the header line are skipped. The first bad line raises
    :class:`MalformedRow`; no rows are returned in that case.
    """

    reader = csv.reader(lines, delimiter=DELIMITER, quotechar=QUOTECHAR, strict=True)
    rows: list[RawRow] = []
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            raise MalformedRow(reader.line_num, "fields", str(exc)) from exc
        if not fields or all(not f.strip() for f in fields):
            continue
        if is_header(fields):
            _logger.debug("skipping header on line %d", reader.line_num)
            continue
        rows.append(parse_row(fields, reader.line_num))
    _logger.debug("parsed %d statement rows", len(rows))
    return rows


def read_statement(
    path: str | PathLike[str], *, encoding: str = DEFAULT_ENCODING
) -> list[RawRow]:
    """Read and parse a statement file."""

    p = Path(path)
    with p.open(encoding=encoding, newline="") as f:
        return parse_statement(f)


__all__ = [
    "DEFAULT_ENCODING",
    "HEADER_SENTINELS",
    "is_header",
    "parse_amount",
    "parse_date",
    "parse_row",
    "parse_statement",
    "read_statement",
]
