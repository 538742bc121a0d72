"""FX normalisation for two-date market-cap comparisons.

Both ends of a comparison are converted through one rate snapshot taken as
of the later ("to") date. An FX move between the two dates would otherwise
show up as a valuation change. When no snapshot can be obtained at all the
previously stored converted values are used instead and flagged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol

from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.rates.conversion import ConversionResult, convert
from fx_normalizer.rates.snapshot import RateSnapshot, build_snapshot
from fx_normalizer.utils.logger import get_logger
from fx_normalizer.utils.timestamps import date_to_timestamp

LOGGER = get_logger(__name__)

FX_NOISE_WARNING = "FX-noise not eliminated"
DEFAULT_REPORTING_CURRENCY = "USD"


class QuoteSource(Protocol):
    """Anything able to return the latest quote per symbol at/before a cutoff."""

    def latest_quotes(self, cutoff: int | None = None) -> list[RateQuote]:
        ...  # pragma: no cover - protocol definition


def snapshot_as_of(source: QuoteSource, cutoff: int | None = None) -> RateSnapshot:
    """Build a fresh snapshot from ``source`` for ``cutoff`` (``None`` = latest)."""

    return build_snapshot(source.latest_quotes(cutoff), as_of=cutoff)


def resolve_normalization_snapshot(source: QuoteSource, to_date: str | date) -> RateSnapshot:
    """Return the snapshot used to normalise a comparison ending on ``to_date``.

    Falls back to the globally latest quotes when nothing exists at or before
    midnight UTC of ``to_date``. The returned snapshot may still be empty.
    """

    snapshot = snapshot_as_of(source, date_to_timestamp(to_date))
    if snapshot:
        return snapshot
    LOGGER.warning("No exchange rates found for %s - falling back to latest rates", to_date)
    snapshot = snapshot_as_of(source, None)
    if not snapshot:
        LOGGER.warning(
            "No exchange rates found at all; comparisons will include currency changes"
        )
    return snapshot


@dataclass(frozen=True, slots=True)
class NormalizedValue:
    """A reporting-currency value plus how it was obtained."""

    value: float
    conversion: ConversionResult | None
    fx_normalized: bool
    warnings: tuple[str, ...] = ()


def normalize_value(
    original_amount: float,
    original_currency: str | None,
    stored_value: float | None,
    snapshot: RateSnapshot | None,
    *,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> NormalizedValue:
    """Convert one side of a comparison through the shared ``snapshot``.

    ``stored_value`` is the figure converted at ingestion time with that
    day's rates; it is only used when ``snapshot`` is empty.
    """

    currency = original_currency or reporting_currency
    if not snapshot:
        fallback = stored_value if stored_value is not None else original_amount
        return NormalizedValue(
            value=fallback,
            conversion=None,
            fx_normalized=False,
            warnings=(FX_NOISE_WARNING,),
        )
    result = convert(original_amount, currency, reporting_currency, snapshot)
    return NormalizedValue(
        value=result.amount,
        conversion=result,
        fx_normalized=True,
        warnings=result.warnings,
    )


@dataclass(frozen=True, slots=True)
class NormalizedChange:
    absolute_change: float
    percentage_change: float


def normalized_change(from_value: float, to_value: float) -> NormalizedChange:
    absolute = to_value - from_value
    percentage = (absolute / from_value) * 100.0 if from_value != 0 else 0.0
    return NormalizedChange(absolute_change=absolute, percentage_change=percentage)


__all__ = [
    "DEFAULT_REPORTING_CURRENCY",
    "FX_NOISE_WARNING",
    "NormalizedChange",
    "NormalizedValue",
    "QuoteSource",
    "normalize_value",
    "normalized_change",
    "resolve_normalization_snapshot",
    "snapshot_as_of",
]
