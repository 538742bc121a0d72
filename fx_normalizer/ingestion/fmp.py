"""Client for the Financial Modeling Prep forex quotes endpoint."""

from __future__ import annotations

import os
from typing import Any, Iterable

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.utils.logger import get_logger
from fx_normalizer.utils.timestamps import now_timestamp

LOGGER = get_logger(__name__)

FMP_FOREX_URL = "https://financialmodelingprep.com/api/v3/quotes/forex"
API_KEY_ENV_VAR = "FINANCIALMODELINGPREP_API_KEY"


def parse_forex_payload(payload: Iterable[dict[str, Any]], as_of: int) -> list[RateQuote]:
    """Turn the provider's JSON entries into quotes.

    Entries without a ``name`` or ``price`` are skipped. The endpoint only
    publishes one price, so it is stored as both ask and bid.
    """

    quotes: list[RateQuote] = []
    for entry in payload:
        symbol = entry.get("name")
        price = entry.get("price")
        if not symbol or price is None:
            LOGGER.debug("Skipping incomplete forex entry: %s", entry)
            continue
        try:
            value = float(price)
        except (TypeError, ValueError):
            LOGGER.debug("Skipping forex entry with non-numeric price: %s", entry)
            continue
        quotes.append(RateQuote(symbol=str(symbol), ask=value, bid=value, as_of=as_of))
    return quotes


class FMPForexClient:
    """Fetch current forex quotes from Financial Modeling Prep."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: int = 30,
        base_url: str = FMP_FOREX_URL,
        session: requests.Session | None = None,
    ) -> None:
        resolved_key = api_key or os.environ.get(API_KEY_ENV_VAR)
        if not resolved_key:
            raise ValueError(f"{API_KEY_ENV_VAR} must be set to fetch exchange rates")
        self.api_key = resolved_key
        self.timeout = timeout
        self.base_url = base_url
        self.session = session or requests.Session()

    @retry(
        retry=retry_if_exception_type(requests.RequestException),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _get_payload(self) -> list[dict[str, Any]]:
        response = self.session.get(
            self.base_url, params={"apikey": self.api_key}, timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(f"Unexpected forex response shape: {type(payload).__name__}")
        return payload

    def fetch_quotes(self, as_of: int | None = None) -> list[RateQuote]:
        """Return the provider's current quotes stamped with ``as_of`` (default: now)."""

        payload = self._get_payload()
        quotes = parse_forex_payload(payload, now_timestamp() if as_of is None else as_of)
        LOGGER.info("Fetched %s forex quotes (%s entries skipped)", len(quotes), len(payload) - len(quotes))
        return quotes

    def close(self) -> None:  # pragma: no cover - trivial
        self.session.close()


__all__ = ["API_KEY_ENV_VAR", "FMPForexClient", "FMP_FOREX_URL", "parse_forex_payload"]
