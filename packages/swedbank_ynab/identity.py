"""Deterministic import ids for ledger deduplication.

The ledger drops a transaction whose ``import_id`` it has seen before, so the
same statement imported twice must produce the same ids, and two identical
purchases on one day must not collapse into one.

Digest input (``|``-joined, in this order):

1. archive code
2. principal amount before fee merging, source form (``"1,00"``)
3. principal direction code (``D``/``K``)
4. settlement date, source form (``DD.MM.YYYY``)
5. occurrence index: how many earlier transactions in this run share
   fields 1-4 (0 for the first)

The digest is MD5 rendered as 32 lowercase hex characters, which fits the
ledger API's 36-character ``import_id`` limit.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from collections.abc import Iterable
from typing import TypeAlias

from .formatter import format_decimal
from .models import Transaction

ID_LENGTH = 32

IdentityKey: TypeAlias = tuple[str, str, str, str]


def identity_key(txn: Transaction) -> IdentityKey:
    row = txn.principal
    return (
        row.archive_code,
        format_decimal(row.amount),
        row.direction.value,
        row.date.strftime("%d.%m.%Y"),
    )


def digest(key: IdentityKey, occurrence: int) -> str:
    payload = "|".join((*key, str(occurrence)))
    return hashlib.md5(payload.encode("utf-8"), usedforsecurity=False).hexdigest()


def assign_ids(transactions: Iterable[Transaction]) -> list[str]:
    """Return one id per transaction, aligned with the input order."""

    seen: Counter[IdentityKey] = Counter()
    ids: list[str] = []
    for txn in transactions:
        key = identity_key(txn)
        ids.append(digest(key, seen[key]))
        seen[key] += 1
    return ids


__all__ = ["ID_LENGTH", "assign_ids", "digest", "identity_key"]
