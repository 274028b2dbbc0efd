"""Keep only transactions in the destination ledger's currency.

Other currencies are skipped, never converted; the skip count is returned for
diagnostics.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol


class HasCurrency(Protocol):
    @property
    def currency(self) -> str: ...


@dataclass(frozen=True, slots=True)
class CurrencyPartition:
    kept: tuple[Any, ...]
    skipped: tuple[Any, ...]

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def normalize_currency(code: str) -> str:
    code = code.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"invalid currency code: {code!r}")
    return code


def partition_by_currency(items: Iterable[HasCurrency], currency: str) -> CurrencyPartition:
    """Split ``items`` into (matching, non-matching) by case-insensitive code."""

    target = normalize_currency(currency)
    kept: list[HasCurrency] = []
    skipped: list[HasCurrency] = []
    for item in items:
        (kept if item.currency.upper() == target else skipped).append(item)
    return CurrencyPartition(kept=tuple(kept), skipped=tuple(skipped))


__all__ = ["CurrencyPartition", "normalize_currency", "partition_by_currency"]
