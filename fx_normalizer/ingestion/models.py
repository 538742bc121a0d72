"""Data models shared across ingestion modules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RateQuote:
    """A single forex quote as delivered by the market-data provider.

    ``as_of`` is a unix timestamp in seconds. Only ``ask`` feeds the rate
    engine; ``bid`` is stored for completeness.
    """

    symbol: str
    ask: float
    bid: float
    as_of: int

    @property
    def rate(self) -> float:
        return self.ask


@dataclass(slots=True)
class MarketCapRecord:
    """One row of a market-cap snapshot export."""

    ticker: str
    name: str
    rank: int | None = None
    market_cap_original: float | None = None
    original_currency: str | None = None
    market_cap_eur: float | None = None
    market_cap_usd: float | None = None


__all__ = ["MarketCapRecord", "RateQuote"]
