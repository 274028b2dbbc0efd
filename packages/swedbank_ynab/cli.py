"""CLI for the ``swedbank_ynab`` package.

Two subcommands share the conversion pipeline in :mod:`swedbank_ynab.api`:

- ``convert``: write the ledger entries to a CSV file for manual import.
- ``import``: submit the entries to a YNAB account through the API.

Options fall back to environment variables, and a ``.env`` file in the
working directory is loaded first with ``python-dotenv`` (it never overrides
variables already set). Command handlers (``cmd_*``) return a process exit
code and print errors to stderr; the Typer wrappers only translate options.
"""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .api import convert_file
from .errors import LedgerApiError, MalformedRow
from .formatter import format_decimal
from .ingest.swedbank_csv import DEFAULT_ENCODING
from .logging_setup import configure_logging, get_logger
from .models import ConversionResult
from .writers import DEFAULT_OUTPUT, write_ledger_csv

TOKEN_ENV = "YNAB_TOKEN"
BUDGET_ENV = "YNAB_BUDGET_ID"
ACCOUNT_ENV = "YNAB_ACCOUNT_ID"
CURRENCY_ENV = "SWEDBANK_YNAB_CURRENCY"
ENCODING_ENV = "SWEDBANK_YNAB_ENCODING"
DEFAULT_CURRENCY = "EUR"

_logger = get_logger("swedbank_ynab.cli")


# ---- Shared helpers ----------------------------------------------------------


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _load_statement(
    statement_path: str | Path, *, currency: str, encoding: str
) -> ConversionResult | None:
    """Run the pipeline over a file and print its warnings.

    Prints an error and returns ``None`` on failure.
    """

    try:
        result = convert_file(statement_path, currency=currency, encoding=encoding)
    except FileNotFoundError:
        _error(f"File not found: {statement_path}")
    except PermissionError:
        _error(f"Permission denied: {statement_path}")
    except LookupError:
        _error(f"Unknown encoding: {encoding}")
    except UnicodeDecodeError as e:
        _error(f"Cannot decode {statement_path} as {encoding}: {e}")
    except MalformedRow as e:
        _error(f"Malformed statement {statement_path}: {e}")
    except ValueError as e:
        _error(str(e))
    else:
        _report(result, currency)
        return result
    return None


def _report(result: ConversionResult, currency: str) -> None:
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if result.skipped_currency:
        print(
            f"Skipped {result.skipped_currency} transaction(s) not in {currency.upper()}.",
            file=sys.stderr,
        )


def _format_milliunits(value: int) -> str:
    amount = Decimal(value) / 1000
    return f"-{format_decimal(-amount)}" if amount < 0 else format_decimal(amount)


def _print_dry_run(result: ConversionResult) -> int:
    for entry in result.entries:
        print("\t".join(entry.as_row()))
    print(f"Dry run: {len(result.entries)} transaction(s) not posted.")
    return 0


# ---- Command handlers --------------------------------------------------------


def cmd_convert(
    statement_path: str | Path,
    *,
    out: str | Path = DEFAULT_OUTPUT,
    currency: str = DEFAULT_CURRENCY,
    encoding: str = DEFAULT_ENCODING,
) -> int:
    """Convert a statement and write ``Id,Date,Payee,Memo,Amount`` CSV to ``out``."""

    result = _load_statement(statement_path, currency=currency, encoding=encoding)
    if result is None:
        return 1

    try:
        count = write_ledger_csv(result.entries, out)
    except OSError as e:
        return _error(f"Failed to write {out}: {e}")

    print(f"Wrote {count} transaction(s) to {out}")
    return 0


def cmd_import(
    statement_path: str | Path,
    *,
    token: str | None,
    budget_id: str | None,
    account_id: str | None,
    currency: str | None = None,
    encoding: str = DEFAULT_ENCODING,
    dry_run: bool = False,
) -> int:
    """Convert a statement and post the entries to a YNAB account.

    When ``currency`` is omitted it is read from the budget settings. With
    ``dry_run`` the entries are printed instead of posted; credentials are
    then only needed to look up the currency.
    """

    from .ynab_client import YnabClient

    if dry_run and currency:
        result = _load_statement(statement_path, currency=currency, encoding=encoding)
        return 1 if result is None else _print_dry_run(result)

    if not (token and budget_id and account_id):
        missing = [
            label
            for label, value in (
                (f"--token ({TOKEN_ENV})", token),
                (f"--budget-id ({BUDGET_ENV})", budget_id),
                (f"--account-id ({ACCOUNT_ENV})", account_id),
            )
            if not value
        ]
        return _error("missing required settings: " + ", ".join(missing))
    client = YnabClient(token=token, budget_id=budget_id, account_id=account_id)

    if not currency:
        try:
            currency = client.get_budget_currency()
        except LedgerApiError as e:
            return _error(f"could not read budget currency: {e}")
        _logger.info("using budget currency %s", currency)

    result = _load_statement(statement_path, currency=currency, encoding=encoding)
    if result is None:
        return 1
    if dry_run:
        return _print_dry_run(result)

    if not result.entries:
        print("No transactions to import.")
        return 0

    try:
        posted = client.post_transactions(result.entries)
        balance = client.get_account_balance()
    except LedgerApiError as e:
        return _error(str(e))

    print(
        f"Imported {len(posted.transaction_ids)} transaction(s); "
        f"{len(posted.duplicate_import_ids)} already imported."
    )
    print(f"Account balance: {_format_milliunits(balance)} {currency.upper()}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Convert Swedbank CSV statements into YNAB transactions. "
        "Loads settings from a local .env before running."
    ),
)

# Module-level argument object (no calls in parameter defaults).
STATEMENT_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="Path to a Swedbank statement export (semicolon-delimited CSV).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("convert")
def convert_cmd(
    statement: Annotated[Path, STATEMENT_ARGUMENT],
    *,
    out: Path = typer.Option(Path(DEFAULT_OUTPUT), "--out", "-o", help="Output CSV path."),
    currency: str = typer.Option(
        DEFAULT_CURRENCY, envvar=CURRENCY_ENV, help="Ledger currency; other currencies are skipped."
    ),
    encoding: str = typer.Option(
        DEFAULT_ENCODING, envvar=ENCODING_ENV, help="Statement file encoding."
    ),
) -> None:
    """Write the statement as a YNAB-importable CSV file."""

    raise typer.Exit(cmd_convert(statement, out=out, currency=currency, encoding=encoding))


@app.command("import")
def import_cmd(
    statement: Annotated[Path, STATEMENT_ARGUMENT],
    *,
    token: str | None = typer.Option(
        None, envvar=TOKEN_ENV, show_envvar=True, help="YNAB personal access token."
    ),
    budget_id: str | None = typer.Option(None, envvar=BUDGET_ENV, show_envvar=True),
    account_id: str | None = typer.Option(None, envvar=ACCOUNT_ENV, show_envvar=True),
    currency: str | None = typer.Option(
        None, envvar=CURRENCY_ENV, help="Ledger currency (defaults to the budget's)."
    ),
    encoding: str = typer.Option(
        DEFAULT_ENCODING, envvar=ENCODING_ENV, help="Statement file encoding."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print entries instead of posting."),
) -> None:
    """Post the statement's transactions to a YNAB account."""

    raise typer.Exit(
        cmd_import(
            statement,
            token=token,
            budget_id=budget_id,
            account_id=account_id,
            currency=currency,
            encoding=encoding,
            dry_run=dry_run,
        )
    )


@app.callback()
def _root(
    *,
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Enable debug logging."),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level name (overrides SWEDBANK_YNAB_LOG_LEVEL)."
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, verbose=verbose)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    main()
