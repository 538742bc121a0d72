"""Plausibility checks applied to raw exchange rates before they are trusted."""

from __future__ import annotations

import math
from typing import Final

from fx_normalizer.rates.currencies import format_pair

# JPY/KRW style pairs stay well below the ceiling; anything above is
# usually a unit or fat-finger error in the quote feed.
MAX_REASONABLE_RATE: Final[float] = 10000.0
MIN_REASONABLE_RATE: Final[float] = 0.0001


def validate_rate(rate: float, from_currency: str, to_currency: str) -> str | None:
    """Return an advisory warning for ``rate`` or ``None`` when it looks sane.

    The check never blocks a conversion; callers attach the message to the
    result so reports can flag the row.
    """

    pair = format_pair(from_currency, to_currency)
    if rate <= 0:
        return f"Invalid exchange rate for {pair}: {rate} (must be positive)"
    if math.isnan(rate) or math.isinf(rate):
        return f"Invalid exchange rate for {pair}: {rate} (NaN or infinite)"
    if rate > MAX_REASONABLE_RATE:
        return f"Suspicious exchange rate for {pair}: {rate} (unusually high)"
    if rate < MIN_REASONABLE_RATE:
        return f"Suspicious exchange rate for {pair}: {rate} (unusually low)"
    return None


__all__ = ["MAX_REASONABLE_RATE", "MIN_REASONABLE_RATE", "validate_rate"]
