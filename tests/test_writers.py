import csv
import io
from pathlib import Path

from swedbank_ynab.models import LedgerEntry
from swedbank_ynab.writers import CSV_HEADER, write_ledger_csv

ENTRIES = [
    LedgerEntry(id="a" * 32, date="01/09/2019", payee="A STORE", memo="", amount="-1,00"),
    LedgerEntry(
        id="b" * 32,
        date="04/09/2019",
        payee="JOHN DOE",
        memo="Taco Money, \"extra\"",
        amount="10,65",
    ),
]


def test_writes_header_and_quotes_fields_with_commas():
    buf = io.StringIO()

    count = write_ledger_csv(ENTRIES, buf)

    assert count == 2
    assert buf.getvalue().splitlines() == [
        "Id,Date,Payee,Memo,Amount",
        f"{'a' * 32},01/09/2019,A STORE,,\"-1,00\"",
        f"{'b' * 32},04/09/2019,JOHN DOE,\"Taco Money, \"\"extra\"\"\",\"10,65\"",
    ]


def test_round_trips_through_a_csv_reader(tmp_path: Path):
    out = tmp_path / "out.csv"

    write_ledger_csv(ENTRIES, out)

    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == list(CSV_HEADER)
    assert rows[1:] == [list(e.as_row()) for e in ENTRIES]


def test_empty_sequence_writes_header_only(tmp_path: Path):
    out = tmp_path / "out.csv"

    assert write_ledger_csv([], out) == 0
    assert out.read_text(encoding="utf-8") == "Id,Date,Payee,Memo,Amount\n"
