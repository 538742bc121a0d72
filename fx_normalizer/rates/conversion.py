"""Resolve conversions between two currencies against a rate snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from fx_normalizer.rates.currencies import canonicalize_currency, format_pair
from fx_normalizer.rates.snapshot import PairKey, RateSnapshot
from fx_normalizer.rates.validation import validate_rate
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)

NOT_FOUND_MESSAGE = "No exchange rate found for {pair}; amount left unconverted"


class ConversionSource(str, Enum):
    """How a conversion was resolved."""

    SAME = "same"
    DIRECT = "direct"
    REVERSE = "reverse"
    CROSS = "cross"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of :func:`convert`.

    ``rate`` is the effective rate from the caller's original unit (possibly a
    subunit such as pence) to the target's original unit.
    """

    amount: float
    rate: float
    source: ConversionSource
    warnings: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.source is not ConversionSource.NOT_FOUND

    @property
    def is_reliable(self) -> bool:
        """False when unresolved or computed from a non-positive/NaN rate."""

        if not self.found:
            return False
        return not any(warning.startswith("Invalid exchange rate") for warning in self.warnings)


def _as_snapshot(snapshot: RateSnapshot | Mapping[str, float]) -> RateSnapshot:
    if isinstance(snapshot, RateSnapshot):
        return snapshot
    return RateSnapshot.from_rates(snapshot)


def _collect_warnings(*legs: tuple[PairKey, float]) -> tuple[str, ...]:
    warnings: list[str] = []
    for (base, quote), rate in legs:
        warning = validate_rate(rate, base, quote)
        if warning is not None:
            warnings.append(warning)
    return tuple(warnings)


def convert(
    amount: float,
    from_currency: str,
    to_currency: str,
    snapshot: RateSnapshot | Mapping[str, float],
) -> ConversionResult:
    """Convert ``amount`` from ``from_currency`` into ``to_currency``.

    Resolution order: same code, direct pair, reverse pair, one intermediate
    currency, then the not-found fallback which hands back the unconverted
    amount with a warning. Bad rates are flagged, never raised.
    """

    if from_currency == to_currency:
        return ConversionResult(amount=amount, rate=1.0, source=ConversionSource.SAME)

    rates = _as_snapshot(snapshot)
    canonical_from, source_divisor = canonicalize_currency(from_currency)
    canonical_to, target_multiplier = canonicalize_currency(to_currency)
    base_amount = amount / source_divisor

    def _result(rate: float, source: ConversionSource, warnings: tuple[str, ...]) -> ConversionResult:
        return ConversionResult(
            amount=base_amount * rate * target_multiplier,
            rate=rate * target_multiplier / source_divisor,
            source=source,
            warnings=warnings,
        )

    # A subunit and its own currency (GBp, GBP) differ only by scale; no rate lookup.
    if canonical_from == canonical_to:
        return _result(1.0, ConversionSource.SAME, ())

    direct_key = (canonical_from, canonical_to)
    direct_rate = rates.get(direct_key)
    if direct_rate is not None:
        legs = rates.legs(*direct_key)
        if legs is None:
            return _result(
                direct_rate, ConversionSource.DIRECT, _collect_warnings((direct_key, direct_rate))
            )
        first, second = legs
        warnings = _collect_warnings((first, rates[first]), (second, rates[second]))
        return _result(direct_rate, ConversionSource.CROSS, warnings)

    reverse_key = (canonical_to, canonical_from)
    reverse_rate = rates.get(reverse_key)
    if reverse_rate is not None:
        inverted = 1.0 / reverse_rate if reverse_rate != 0 else float("inf")
        warnings = _collect_warnings((direct_key, inverted))
        return _result(inverted, ConversionSource.REVERSE, warnings)

    for intermediate, first_rate in rates.pairs_from(canonical_from):
        second_rate = rates.rate(intermediate, canonical_to)
        if second_rate is None:
            continue
        warnings = _collect_warnings(
            ((canonical_from, intermediate), first_rate),
            ((intermediate, canonical_to), second_rate),
        )
        return _result(first_rate * second_rate, ConversionSource.CROSS, warnings)

    pair = format_pair(from_currency, to_currency)
    LOGGER.debug("No exchange rate found for %s", pair)
    return ConversionResult(
        amount=amount,
        rate=1.0,
        source=ConversionSource.NOT_FOUND,
        warnings=(NOT_FOUND_MESSAGE.format(pair=pair),),
    )


__all__ = ["ConversionResult", "ConversionSource", "NOT_FOUND_MESSAGE", "convert"]
