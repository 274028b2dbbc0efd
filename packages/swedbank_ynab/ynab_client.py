"""Thin client for the YNAB (You Need A Budget) REST API.

Uses ``urllib.request`` with a bearer token. Request and response bodies are
modelled with Pydantic so unexpected shapes fail loudly with a
:class:`~swedbank_ynab.errors.LedgerApiError` instead of a ``KeyError`` deep in
the CLI.

Endpoints used:

- ``POST /budgets/{budget_id}/transactions`` (bulk create; duplicates by
  ``import_id`` are reported, not re-created)
- ``GET /budgets/{budget_id}/accounts/{account_id}`` (balance)
- ``GET /budgets/{budget_id}/settings`` (budget currency)

Retries and rate limiting are left to the caller.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import LedgerApiError
from .logging_setup import get_logger
from .models import LedgerEntry

YNAB_API_URL = "https://api.ynab.com/v1"
PAYEE_MAX_LENGTH = 50
MEMO_MAX_LENGTH = 200

_logger = get_logger("swedbank_ynab.ynab_client")


# ---------------------------------------------------------------------------
# Payload and response models
# ---------------------------------------------------------------------------


def to_milliunits(amount: str) -> int:
    """``"-1,25"`` → ``-1250`` (YNAB amounts are integer thousandths)."""

    return int(Decimal(amount.replace(",", ".")) * 1000)


class YnabTransaction(BaseModel):
    """One transaction in a bulk-create request."""

    model_config = ConfigDict(extra="forbid")

    account_id: str
    date: str
    amount: int
    payee_name: str | None = Field(default=None, max_length=PAYEE_MAX_LENGTH)
    memo: str | None = Field(default=None, max_length=MEMO_MAX_LENGTH)
    cleared: Literal["cleared", "uncleared", "reconciled"] = "cleared"
    approved: bool = False
    import_id: str = Field(max_length=36)

    @classmethod
    def from_entry(cls, entry: LedgerEntry, *, account_id: str) -> YnabTransaction:
        iso_date = datetime.strptime(entry.date, "%d/%m/%Y").date().isoformat()
        return cls(
            account_id=account_id,
            date=iso_date,
            amount=to_milliunits(entry.amount),
            payee_name=entry.payee[:PAYEE_MAX_LENGTH] or None,
            memo=entry.memo[:MEMO_MAX_LENGTH] or None,
            import_id=entry.id,
        )


class SavedTransaction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    date: str
    amount: int
    import_id: str | None = None
    payee_name: str | None = None


class PostTransactionsResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction_ids: list[str] = Field(default_factory=list)
    duplicate_import_ids: list[str] = Field(default_factory=list)
    transactions: list[SavedTransaction] = Field(default_factory=list)


class _PostTransactionsResponse(BaseModel):
    data: PostTransactionsResult


class _Account(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    balance: int


class _AccountData(BaseModel):
    account: _Account


class _AccountResponse(BaseModel):
    data: _AccountData


class _CurrencyFormat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    iso_code: str


class _Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    currency_format: _CurrencyFormat


class _SettingsData(BaseModel):
    settings: _Settings


class _SettingsResponse(BaseModel):
    data: _SettingsData


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class YnabClient:
    """Budget/account-scoped YNAB client."""

    def __init__(
        self,
        *,
        token: str,
        budget_id: str,
        account_id: str,
        base_url: str = YNAB_API_URL,
        timeout: float = 30.0,
    ) -> None:
        if not token:
            raise ValueError("a YNAB personal access token is required")
        self.token = token
        self.budget_id = budget_id
        self.account_id = account_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self, method: str, path: str, payload: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Authorization", f"Bearer {self.token}")
        req.add_header("Accept", "application/json")
        if data is not None:
            req.add_header("Content-Type", "application/json")

        _logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise LedgerApiError(e.code, _error_detail(e)) from e
        except urllib.error.URLError as e:
            raise LedgerApiError(None, str(e.reason)) from e

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise LedgerApiError(None, "response body is not valid JSON") from e

    def post_transactions(self, entries: Iterable[LedgerEntry]) -> PostTransactionsResult:
        """Create ``entries`` in the configured account; duplicates are reported."""

        txns = [YnabTransaction.from_entry(e, account_id=self.account_id) for e in entries]
        if not txns:
            return PostTransactionsResult()

        body = self._request(
            "POST",
            f"/budgets/{self.budget_id}/transactions",
            {"transactions": [t.model_dump() for t in txns]},
        )
        result = _parse(_PostTransactionsResponse, body).data
        _logger.info(
            "posted %d transaction(s): %d created, %d duplicate",
            len(txns),
            len(result.transaction_ids),
            len(result.duplicate_import_ids),
        )
        return result

    def get_account_balance(self) -> int:
        """Return the account's cleared + uncleared balance in milliunits."""

        body = self._request("GET", f"/budgets/{self.budget_id}/accounts/{self.account_id}")
        return _parse(_AccountResponse, body).data.account.balance

    def get_budget_currency(self) -> str:
        body = self._request("GET", f"/budgets/{self.budget_id}/settings")
        return _parse(_SettingsResponse, body).data.settings.currency_format.iso_code.upper()


M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], body: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise LedgerApiError(None, f"unexpected response shape: {e}") from e


def _error_detail(e: urllib.error.HTTPError) -> str:
    try:
        raw = e.read().decode("utf-8", errors="replace")
    except OSError:
        return str(e.reason)
    try:
        err = json.loads(raw).get("error") or {}
    except (json.JSONDecodeError, AttributeError):
        return raw or str(e.reason)
    return str(err.get("detail") or err.get("name") or raw)


__all__ = [
    "PostTransactionsResult",
    "SavedTransaction",
    "YNAB_API_URL",
    "YnabClient",
    "YnabTransaction",
    "to_milliunits",
]
