"""Tests for reading market-cap CSV exports."""

from __future__ import annotations

from pathlib import Path

import pytest

from fx_normalizer.ingestion.marketcap_csv import find_csv_for_date, read_market_cap_csv

HEADER = (
    "Rank,Ticker,Name,Market Cap (Original),Original Currency,Market Cap (EUR),Market Cap (USD)\n"
)


def test_read_market_cap_csv(tmp_path: Path) -> None:
    csv_path = tmp_path / "marketcaps_2024-01-01_120000.csv"
    csv_path.write_text(
        HEADER
        + "1,AAPL,Apple Inc.,3000000000000,USD,2700000000000,3000000000000\n"
        + "2,7203.T,Toyota,45000000000000,JPY,NA,\n"
        + "NA,,Missing ticker,1,USD,1,1\n",
        encoding="utf-8",
    )

    records = read_market_cap_csv(csv_path)

    assert [record.ticker for record in records] == ["AAPL", "7203.T"]
    apple, toyota = records
    assert apple.rank == 1
    assert apple.market_cap_original == 3e12
    assert apple.original_currency == "USD"
    assert apple.market_cap_usd == 3e12
    assert toyota.original_currency == "JPY"
    assert toyota.market_cap_eur is None
    assert toyota.market_cap_usd is None


def test_read_market_cap_csv_requires_ticker_column(tmp_path: Path) -> None:
    csv_path = tmp_path / "broken.csv"
    csv_path.write_text("Name,Market Cap (USD)\nApple,1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Ticker"):
        read_market_cap_csv(csv_path)


def test_read_market_cap_csv_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_market_cap_csv(tmp_path / "missing.csv")


def test_find_csv_for_date_prefers_latest_export(tmp_path: Path) -> None:
    (tmp_path / "marketcaps_2024-01-01_080000.csv").write_text(HEADER, encoding="utf-8")
    (tmp_path / "marketcaps_2024-01-01_180000.csv").write_text(HEADER, encoding="utf-8")
    (tmp_path / "marketcaps_2024-01-02_080000.csv").write_text(HEADER, encoding="utf-8")

    assert find_csv_for_date(tmp_path, "2024-01-01").name == "marketcaps_2024-01-01_180000.csv"


def test_find_csv_for_date_raises_when_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        find_csv_for_date(tmp_path, "2024-01-01")
