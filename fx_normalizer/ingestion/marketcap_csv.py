"""Read the market-cap snapshot CSVs produced by the daily export."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd

from fx_normalizer.ingestion.models import MarketCapRecord
from fx_normalizer.utils.timestamps import parse_date

COLUMN_RANK = "Rank"
COLUMN_TICKER = "Ticker"
COLUMN_NAME = "Name"
COLUMN_ORIGINAL = "Market Cap (Original)"
COLUMN_CURRENCY = "Original Currency"
COLUMN_EUR = "Market Cap (EUR)"
COLUMN_USD = "Market Cap (USD)"
NUMERIC_COLUMNS = (COLUMN_RANK, COLUMN_ORIGINAL, COLUMN_EUR, COLUMN_USD)


def find_csv_for_date(output_dir: str | Path, day: str | date) -> Path:
    """Return the newest ``marketcaps_<day>_*.csv`` export inside ``output_dir``."""

    directory = Path(output_dir)
    prefix = f"marketcaps_{parse_date(day).isoformat()}_"
    matches = sorted(directory.glob(f"{prefix}*.csv")) if directory.exists() else []
    if not matches:
        raise FileNotFoundError(
            f"No market cap CSV found for {day} in {directory}; export that date first."
        )
    return matches[-1]


def _optional_float(value: object) -> float | None:
    if pd.isna(value):
        return None
    return float(value)  # type: ignore[arg-type]


def _optional_text(value: object) -> str | None:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def read_market_cap_csv(csv_path: str | Path) -> list[MarketCapRecord]:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    frame = pd.read_csv(path, dtype=str, keep_default_na=True)
    if COLUMN_TICKER not in frame.columns:
        raise ValueError(f"{path} does not contain a {COLUMN_TICKER!r} column")
    for column in NUMERIC_COLUMNS:
        if column not in frame.columns:
            frame[column] = None
        frame[column] = pd.to_numeric(frame[column], errors="coerce")
    if COLUMN_CURRENCY not in frame.columns:
        frame[COLUMN_CURRENCY] = None
    if COLUMN_NAME not in frame.columns:
        frame[COLUMN_NAME] = frame[COLUMN_TICKER]

    records: list[MarketCapRecord] = []
    for _, row in frame.iterrows():
        ticker = _optional_text(row[COLUMN_TICKER])
        if ticker is None:
            continue
        rank = _optional_float(row[COLUMN_RANK])
        records.append(
            MarketCapRecord(
                ticker=ticker,
                name=_optional_text(row[COLUMN_NAME]) or ticker,
                rank=int(rank) if rank is not None else None,
                market_cap_original=_optional_float(row[COLUMN_ORIGINAL]),
                original_currency=_optional_text(row[COLUMN_CURRENCY]),
                market_cap_eur=_optional_float(row[COLUMN_EUR]),
                market_cap_usd=_optional_float(row[COLUMN_USD]),
            )
        )
    return records


__all__ = ["find_csv_for_date", "read_market_cap_csv"]
