"""Currency code helpers shared by the rate engine."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Mapping


@dataclass(frozen=True, slots=True)
class CurrencyAlias:
    """A subunit quote code and how it maps onto its canonical currency."""

    canonical: str
    divisor: int


# Market data quotes some listings in minor units (pence, cents, agorot).
SUBUNIT_ALIASES: Final[Mapping[str, CurrencyAlias]] = MappingProxyType(
    {
        "GBp": CurrencyAlias(canonical="GBP", divisor=100),
        "ZAc": CurrencyAlias(canonical="ZAR", divisor=100),
        "ILA": CurrencyAlias(canonical="ILS", divisor=1),
    }
)

PAIR_SEPARATOR: Final[str] = "/"


def canonicalize_currency(code: str) -> tuple[str, int]:
    """Return ``(canonical_code, divisor)`` for ``code``.

    Codes are only stripped, never case-folded: ``GBp`` and ``GBP`` are
    different currencies as far as quotes are concerned.
    """

    cleaned = code.strip()
    alias = SUBUNIT_ALIASES.get(cleaned)
    if alias is None:
        return cleaned, 1
    return alias.canonical, alias.divisor


def parse_pair_symbol(symbol: str) -> tuple[str, str] | None:
    """Split ``"FROM/TO"`` into a key tuple, or ``None`` when malformed."""

    if not isinstance(symbol, str):
        return None
    parts = symbol.split(PAIR_SEPARATOR)
    if len(parts) != 2:
        return None
    base, quote = (part.strip() for part in parts)
    if not base or not quote:
        return None
    return base, quote


def format_pair(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}{PAIR_SEPARATOR}{to_currency}"


__all__ = [
    "CurrencyAlias",
    "PAIR_SEPARATOR",
    "SUBUNIT_ALIASES",
    "canonicalize_currency",
    "format_pair",
    "parse_pair_symbol",
]
