"""Convert a company's market cap into the EUR and USD reporting currencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fx_normalizer.rates.conversion import ConversionResult, convert
from fx_normalizer.rates.snapshot import RateSnapshot


@dataclass(frozen=True, slots=True)
class ConvertedMarketCap:
    """EUR/USD figures plus the effective rates worth persisting next to them."""

    market_cap_original: float
    original_currency: str
    market_cap_eur: float
    market_cap_usd: float
    eur_rate: float
    usd_rate: float
    eur_conversion: ConversionResult
    usd_conversion: ConversionResult

    @property
    def warnings(self) -> tuple[str, ...]:
        merged: list[str] = []
        for warning in self.eur_conversion.warnings + self.usd_conversion.warnings:
            if warning not in merged:
                merged.append(warning)
        return tuple(merged)


def convert_market_cap(
    amount: float,
    currency: str,
    snapshot: RateSnapshot | Mapping[str, float],
) -> ConvertedMarketCap:
    eur = convert(amount, currency, "EUR", snapshot)
    usd = convert(amount, currency, "USD", snapshot)
    return ConvertedMarketCap(
        market_cap_original=amount,
        original_currency=currency,
        market_cap_eur=eur.amount,
        market_cap_usd=usd.amount,
        eur_rate=eur.rate,
        usd_rate=usd.rate,
        eur_conversion=eur,
        usd_conversion=usd,
    )


__all__ = ["ConvertedMarketCap", "convert_market_cap"]
