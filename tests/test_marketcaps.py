"""Tests for converting market caps into the reporting currencies."""

import pytest

from fx_normalizer.rates.conversion import ConversionSource
from fx_normalizer.rates.snapshot import build_snapshot
from fx_normalizer.reporting.marketcaps import convert_market_cap


def test_convert_market_cap_handles_pence() -> None:
    snapshot = build_snapshot([("GBP/USD", 1.25), ("EUR/USD", 1.1)])

    converted = convert_market_cap(1000.0, "GBp", snapshot)

    assert converted.market_cap_usd == pytest.approx(12.5)
    assert converted.market_cap_eur == pytest.approx(12.5 / 1.1)
    assert converted.usd_rate == pytest.approx(0.0125)
    assert converted.eur_conversion.source is ConversionSource.CROSS
    assert converted.warnings == ()


def test_convert_market_cap_merges_warnings() -> None:
    converted = convert_market_cap(10.0, "XYZ", {})

    assert converted.market_cap_eur == 10.0
    assert converted.market_cap_usd == 10.0
    assert converted.warnings == (
        "No exchange rate found for XYZ/EUR; amount left unconverted",
        "No exchange rate found for XYZ/USD; amount left unconverted",
    )
