"""Recover the real payee and a clean memo from statement free text.

Card settlements and processor payouts carry boilerplate in the description:
the card number, the purchase date, the original amount, an authorization code,
and payment-processor prefixes such as ``PAYPAL *``. Recognizers below each
handle one description shape and are tried in order; the first that returns a
:class:`PayeeMatch` wins. When none match, the counterparty (or the
description) is used as-is.

Everything here is pure string work. The output feeds the ledger entry, so the
same input must always produce the same payee and memo.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import TypeAlias

from .fees import is_fee
from .formatter import format_decimal
from .models import ResolvedTransaction, Transaction

# Payee for rows the bank itself originates (fees, interest) with no counterparty.
BANK_PAYEE = "Swedbank"

_WS_RE = re.compile(r"\s+")

# ``PIRKUMS <card> <DD.MM.YYYY> <amount> <CUR> (<auth code>) <merchant...>``
_CARD_PURCHASE_RE = re.compile(
    r"^PIRKUMS\s+(?P<card>\S+)\s+(?P<date>\d{2}\.\d{2}\.\d{4})\s+(?P<amount>\S+)"
    r"\s+(?P<currency>[A-Z]{3})\s+\((?P<code>[^)]*)\)\s*(?P<merchant>.*)$"
)

_PROCESSOR_PREFIXES = r"PAYPAL|PP|SUMUP|SQ|IZ|ZETTLE_?|STRIPE|PAYSERA"
_PROCESSOR_PREFIX_RE = re.compile(
    rf"^(?:{_PROCESSOR_PREFIXES})\s?\*\s?(?P<rest>\S.*)$", re.IGNORECASE
)
# Processor marker anywhere in a description; the merchant runs to a comma.
_PROCESSOR_MARKER_RE = re.compile(
    rf"\b(?:{_PROCESSOR_PREFIXES})\s?\*\s?(?P<merchant>[^,;]+)", re.IGNORECASE
)
# Counterparty names of merchant-of-record entities.
_MERCHANT_OF_RECORD_RE = re.compile(
    r"\b(?:PAYPAL|STRIPE|PAYSERA|KLARNA|ADYEN|SUMUP|ZETTLE|MOLLIE)\b", re.IGNORECASE
)

# Boilerplate removed from processor memos.
_TXN_CODE_RE = re.compile(r"\b\d{6,}\b")
_EMBEDDED_DATE_RE = re.compile(r"\b\d{2}\.\d{2}\.\d{4}\b")
_EMBEDDED_AMOUNT_RE = re.compile(r"\b\d+(?:[.,]\d{1,2})?\s?[A-Z]{3}\b")


@dataclass(frozen=True, slots=True)
class PayeeMatch:
    payee: str
    memo: str
    date: date | None = None


Recognizer: TypeAlias = Callable[[Transaction], PayeeMatch | None]


def collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def strip_processor(name: str) -> str:
    """Drop a leading ``PAYPAL *``/``SQ *``-style processor prefix."""

    s = collapse(name)
    m = _PROCESSOR_PREFIX_RE.match(s)
    return collapse(m.group("rest")) if m else s


def strip_leading(text: str, prefix: str) -> str:
    """Remove ``prefix`` from the start of ``text`` when it ends on a word boundary."""

    if not prefix:
        return text
    if text.upper() == prefix.upper():
        return ""
    if text.upper().startswith(prefix.upper() + " "):
        return text[len(prefix) :].strip()
    return text


def _clean_memo(text: str) -> str:
    s = _TXN_CODE_RE.sub(" ", text)
    s = _EMBEDDED_DATE_RE.sub(" ", s)
    s = _EMBEDDED_AMOUNT_RE.sub(" ", s)
    return collapse(s).strip(" ,;-/")


# ---------------------------------------------------------------------------
# Recognizers
# ---------------------------------------------------------------------------


def recognize_bank_fee(txn: Transaction) -> PayeeMatch | None:
    """A fee with no parent transaction is paid to the bank."""

    row = txn.principal
    if not is_fee(row) or row.counterparty:
        return None
    return PayeeMatch(payee=BANK_PAYEE, memo=collapse(row.description))


def recognize_card_purchase(txn: Transaction) -> PayeeMatch | None:
    """Card purchase settlement; the embedded date is the purchase date."""

    m = _CARD_PURCHASE_RE.match(collapse(txn.principal.description))
    if m is None:
        return None

    try:
        purchased = datetime.strptime(m.group("date"), "%d.%m.%Y").date()
    except ValueError:
        purchased = None

    merchant = strip_processor(m.group("merchant"))
    payee = strip_processor(txn.principal.counterparty) or merchant or BANK_PAYEE
    return PayeeMatch(payee=payee, memo=strip_leading(merchant, payee), date=purchased)


def recognize_merchant_of_record(txn: Transaction) -> PayeeMatch | None:
    """Processor payout or payment: ``PAYPAL *SPOTIFY`` style markers."""

    row = txn.principal
    # Codes, dates and amounts go first so "12,99 EUR" does not split a merchant.
    cleaned = _clean_memo(row.description)
    m = _PROCESSOR_MARKER_RE.search(cleaned)
    if m is not None:
        payee = collapse(m.group("merchant")).strip(" ,;-/")
        if payee:
            rest = cleaned[: m.start()] + " " + cleaned[m.end() :]
            return PayeeMatch(payee=payee, memo=_clean_memo(rest))

    if _MERCHANT_OF_RECORD_RE.search(row.counterparty):
        head, _, tail = cleaned.partition(",")
        if head.strip():
            return PayeeMatch(payee=head.strip(), memo=collapse(tail))
    return None


RECOGNIZERS: tuple[Recognizer, ...] = (
    recognize_bank_fee,
    recognize_card_purchase,
    recognize_merchant_of_record,
)


def _fallback(txn: Transaction) -> PayeeMatch:
    row = txn.principal
    description = collapse(row.description)
    counterparty = strip_processor(row.counterparty)
    if counterparty:
        return PayeeMatch(payee=counterparty, memo=strip_leading(description, counterparty))
    if description:
        return PayeeMatch(payee=description, memo="")
    return PayeeMatch(payee=BANK_PAYEE, memo="")


def _folded_notes(txn: Transaction) -> list[str]:
    notes = [
        f"{collapse(p.description) or 'Part'} {format_decimal(p.amount)} {p.currency}"
        for p in txn.parts
    ]
    notes.extend(f"Fee {format_decimal(f.amount)} {f.currency}" for f in txn.fees)
    return notes


def resolve(
    txn: Transaction, recognizers: Sequence[Recognizer] = RECOGNIZERS
) -> ResolvedTransaction:
    """Resolve payee, memo and ledger date for one transaction."""

    for recognizer in recognizers:
        match = recognizer(txn)
        if match is not None:
            break
    else:
        match = _fallback(txn)

    memo_parts = [p for p in (match.memo, *_folded_notes(txn)) if p]
    return ResolvedTransaction(
        transaction=txn,
        payee=match.payee,
        memo="; ".join(memo_parts),
        date=match.date or txn.date,
    )


def resolve_all(
    transactions: Iterable[Transaction], recognizers: Sequence[Recognizer] = RECOGNIZERS
) -> list[ResolvedTransaction]:
    return [resolve(t, recognizers) for t in transactions]


__all__ = [
    "BANK_PAYEE",
    "PayeeMatch",
    "RECOGNIZERS",
    "Recognizer",
    "collapse",
    "recognize_bank_fee",
    "recognize_card_purchase",
    "recognize_merchant_of_record",
    "resolve",
    "resolve_all",
    "strip_leading",
    "strip_processor",
]
