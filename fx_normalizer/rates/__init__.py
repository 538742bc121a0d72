"""Exchange-rate engine: snapshots, conversion and normalisation."""

from __future__ import annotations

from fx_normalizer.rates.conversion import ConversionResult, ConversionSource, convert
from fx_normalizer.rates.currencies import SUBUNIT_ALIASES, canonicalize_currency
from fx_normalizer.rates.snapshot import RateSnapshot, build_snapshot
from fx_normalizer.rates.validation import MAX_REASONABLE_RATE, MIN_REASONABLE_RATE, validate_rate

__all__ = [
    "ConversionResult",
    "ConversionSource",
    "MAX_REASONABLE_RATE",
    "MIN_REASONABLE_RATE",
    "RateSnapshot",
    "SUBUNIT_ALIASES",
    "build_snapshot",
    "canonicalize_currency",
    "convert",
    "validate_rate",
]
