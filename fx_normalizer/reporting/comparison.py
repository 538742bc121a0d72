"""Compare market caps between two dates with FX noise removed."""

from __future__ import annotations

import argparse
import csv
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Sequence

from fx_normalizer.db import DEFAULT_SQLITE_DB_PATH
from fx_normalizer.db.sqlite_backend import SQLiteBackend
from fx_normalizer.ingestion.marketcap_csv import find_csv_for_date, read_market_cap_csv
from fx_normalizer.ingestion.models import MarketCapRecord
from fx_normalizer.rates.conversion import ConversionSource, convert
from fx_normalizer.rates.normalization import (
    DEFAULT_REPORTING_CURRENCY,
    FX_NOISE_WARNING,
    QuoteSource,
    normalize_value,
    normalized_change,
    resolve_normalization_snapshot,
)
from fx_normalizer.rates.snapshot import RateSnapshot
from fx_normalizer.utils.logger import get_logger
from fx_normalizer.utils.timestamps import parse_date

LOGGER = get_logger(__name__)

__all__ = [
    "ComparisonReport",
    "MarketCapComparison",
    "calculate_market_shares",
    "compare_market_caps",
    "csv_header",
    "currencies_used",
    "export_comparison_csv",
    "export_summary_report",
    "main",
    "parse_args",
    "run_comparison",
    "stored_value",
]

# Converted figures persisted next to each market-cap row at export time.
STORED_VALUE_FIELDS = {"EUR": "market_cap_eur", "USD": "market_cap_usd"}
TOP_N = 10


def csv_header(reporting_currency: str = DEFAULT_REPORTING_CURRENCY) -> tuple[str, ...]:
    return (
        "Ticker",
        "Name",
        f"Market Cap From ({reporting_currency})",
        f"Market Cap To ({reporting_currency})",
        f"Absolute Change ({reporting_currency})",
        "Percentage Change (%)",
        "Rank From",
        "Rank To",
        "Rank Change",
        "Market Share From (%)",
        "Market Share To (%)",
        "FX Warnings",
    )


CSV_HEADER = csv_header()


def stored_value(record: MarketCapRecord, reporting_currency: str) -> float | None:
    """Return the figure stored for ``reporting_currency``; ``None`` when none is kept."""

    field_name = STORED_VALUE_FIELDS.get(reporting_currency)
    if field_name is None:
        return None
    return getattr(record, field_name)


@dataclass(slots=True)
class MarketCapComparison:
    ticker: str
    name: str
    market_cap_from: float | None = None
    market_cap_to: float | None = None
    absolute_change: float | None = None
    percentage_change: float | None = None
    rank_from: int | None = None
    rank_to: int | None = None
    rank_change: int | None = None
    market_share_from: float | None = None
    market_share_to: float | None = None
    fx_normalized: bool = True
    warnings: tuple[str, ...] = ()


@dataclass(slots=True)
class ComparisonReport:
    comparisons: list[MarketCapComparison]
    fx_normalized: bool
    csv_path: Path | None = None
    summary_path: Path | None = None
    currencies: set[str] = field(default_factory=set)


def calculate_market_shares(
    records: Iterable[MarketCapRecord],
    *,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> dict[str, float]:
    """Share of the total stored market cap per ticker, in percent.

    Uses the stored figures of ``reporting_currency``. Shares are unitless, so
    currencies without stored figures use the stored USD values instead.
    """

    currency = reporting_currency if reporting_currency in STORED_VALUE_FIELDS else "USD"
    values: dict[str, float] = {}
    for record in records:
        value = stored_value(record, currency)
        if value is not None:
            values[record.ticker] = value
    total = sum(values.values())
    if total <= 0:
        return {}
    return {ticker: value / total * 100.0 for ticker, value in values.items()}


def _normalized_side(
    record: MarketCapRecord | None,
    snapshot: RateSnapshot,
    reporting_currency: str,
) -> tuple[float | None, tuple[str, ...], bool]:
    if record is None or record.market_cap_original is None:
        return None, (), True
    normalized = normalize_value(
        record.market_cap_original,
        record.original_currency,
        stored_value(record, reporting_currency),
        snapshot,
        reporting_currency=reporting_currency,
    )
    return normalized.value, normalized.warnings, normalized.fx_normalized


def compare_market_caps(
    from_records: Sequence[MarketCapRecord],
    to_records: Sequence[MarketCapRecord],
    snapshot: RateSnapshot,
    *,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> list[MarketCapComparison]:
    """Build one comparison row per ticker seen on either date.

    Both dates are converted through ``snapshot``. Rows are ordered by
    percentage change, largest first, with incomplete rows last.
    """

    from_map = {record.ticker: record for record in from_records}
    to_map = {record.ticker: record for record in to_records}
    from_shares = calculate_market_shares(from_records, reporting_currency=reporting_currency)
    to_shares = calculate_market_shares(to_records, reporting_currency=reporting_currency)

    comparisons: list[MarketCapComparison] = []
    for ticker in sorted(set(from_map) | set(to_map)):
        from_record = from_map.get(ticker)
        to_record = to_map.get(ticker)
        name = (from_record or to_record).name  # type: ignore[union-attr]

        value_from, warnings_from, normalized_from = _normalized_side(
            from_record, snapshot, reporting_currency
        )
        value_to, warnings_to, normalized_to = _normalized_side(to_record, snapshot, reporting_currency)

        comparison = MarketCapComparison(
            ticker=ticker,
            name=name,
            market_cap_from=value_from,
            market_cap_to=value_to,
            rank_from=from_record.rank if from_record else None,
            rank_to=to_record.rank if to_record else None,
            market_share_from=from_shares.get(ticker),
            market_share_to=to_shares.get(ticker),
            fx_normalized=normalized_from and normalized_to,
            warnings=tuple(dict.fromkeys(warnings_from + warnings_to)),
        )
        if value_from is not None and value_to is not None:
            change = normalized_change(value_from, value_to)
            comparison.absolute_change = change.absolute_change
            comparison.percentage_change = change.percentage_change
        if comparison.rank_from is not None and comparison.rank_to is not None:
            comparison.rank_change = comparison.rank_from - comparison.rank_to
        comparisons.append(comparison)

    comparisons.sort(
        key=lambda comp: (comp.percentage_change is None, -(comp.percentage_change or 0.0))
    )
    return comparisons


def currencies_used(
    *record_sets: Iterable[MarketCapRecord], reporting_currency: str = DEFAULT_REPORTING_CURRENCY
) -> set[str]:
    currencies: set[str] = set()
    for records in record_sets:
        for record in records:
            if record.original_currency and record.original_currency != reporting_currency:
                currencies.add(record.original_currency)
    return currencies


def _fmt(value: float | int | None, spec: str = ".2f") -> str:
    return "NA" if value is None else format(value, spec)


def _fmt_rank_change(value: int | None) -> str:
    if value is None:
        return "NA"
    return f"+{value}" if value > 0 else str(value)


def _report_stamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def export_comparison_csv(
    comparisons: Sequence[MarketCapComparison],
    from_date: str,
    to_date: str,
    *,
    output_dir: Path,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"comparison_{from_date}_to_{to_date}_{_report_stamp()}.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(csv_header(reporting_currency))
        for comp in comparisons:
            writer.writerow(
                [
                    comp.ticker,
                    comp.name,
                    _fmt(comp.market_cap_from),
                    _fmt(comp.market_cap_to),
                    _fmt(comp.absolute_change),
                    _fmt(comp.percentage_change),
                    _fmt(comp.rank_from, "d"),
                    _fmt(comp.rank_to, "d"),
                    _fmt_rank_change(comp.rank_change),
                    _fmt(comp.market_share_from, ".4f"),
                    _fmt(comp.market_share_to, ".4f"),
                    "; ".join(comp.warnings),
                ]
            )
    LOGGER.info("Comparison data exported to %s", csv_path)
    return csv_path


def _rate_table_lines(snapshot: RateSnapshot, currencies: set[str], reporting_currency: str) -> list[str]:
    if not currencies:
        return [f"_All companies are {reporting_currency}-denominated, no currency conversion needed._"]
    lines = [f"| Currency | Rate to {reporting_currency} |", "|----------|-------------|"]
    for currency in sorted(currencies):
        result = convert(1.0, currency, reporting_currency, snapshot)
        if result.source is ConversionSource.NOT_FOUND:
            lines.append(f"| {currency} | _not available_ |")
        else:
            lines.append(f"| {currency} | {result.rate:.6f} |")
    return lines


def export_summary_report(
    comparisons: Sequence[MarketCapComparison],
    from_date: str,
    to_date: str,
    snapshot: RateSnapshot,
    currencies: set[str],
    *,
    output_dir: Path,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    summary_path = output_dir / f"comparison_{from_date}_to_{to_date}_summary_{_report_stamp()}.md"

    total_from = sum(comp.market_cap_from or 0.0 for comp in comparisons)
    total_to = sum(comp.market_cap_to or 0.0 for comp in comparisons)
    total_change = normalized_change(total_from, total_to)
    ranked = [comp for comp in comparisons if comp.percentage_change is not None]
    gainers = sorted(ranked, key=lambda comp: comp.percentage_change or 0.0, reverse=True)[:TOP_N]
    losers = sorted(ranked, key=lambda comp: comp.percentage_change or 0.0)[:TOP_N]

    lines = [f"# Market Cap Comparison: {from_date} to {to_date}", "", "## Overview Statistics"]
    lines.append(f"- Total Market Cap on {from_date}: {reporting_currency} {total_from / 1e9:.2f}B")
    lines.append(f"- Total Market Cap on {to_date}: {reporting_currency} {total_to / 1e9:.2f}B")
    lines.append(
        f"- Total Change: {reporting_currency} {total_change.absolute_change / 1e9:.2f}B "
        f"({total_change.percentage_change:.2f}%)"
    )
    lines.append("")
    lines.append("## Top 10 Gainers (by percentage)")
    for index, comp in enumerate(gainers, start=1):
        lines.append(
            f"{index}. **{comp.name}** ({comp.ticker}): {comp.percentage_change:+.2f}% "
            f"({reporting_currency} {(comp.absolute_change or 0.0) / 1e6:.2f}M)"
        )
    lines.append("")
    lines.append("## Top 10 Losers (by percentage)")
    for index, comp in enumerate(losers, start=1):
        lines.append(
            f"{index}. **{comp.name}** ({comp.ticker}): {comp.percentage_change:+.2f}% "
            f"({reporting_currency} {(comp.absolute_change or 0.0) / 1e6:.2f}M)"
        )
    lines.append("")
    lines.append("## Market Concentration Analysis")
    lines.append(
        "- Companies with increased market cap: "
        f"{sum(1 for comp in ranked if (comp.percentage_change or 0.0) > 0)}"
    )
    lines.append(
        "- Companies with decreased market cap: "
        f"{sum(1 for comp in ranked if (comp.percentage_change or 0.0) < 0)}"
    )
    lines.append(
        "- New companies in list: "
        f"{sum(1 for comp in comparisons if comp.market_cap_from is None and comp.market_cap_to is not None)}"
    )
    lines.append(
        "- Companies no longer in list: "
        f"{sum(1 for comp in comparisons if comp.market_cap_from is not None and comp.market_cap_to is None)}"
    )
    lines.append("")
    lines.append("## Exchange Rates Used for Normalization")
    lines.append("")
    if snapshot:
        lines.append(
            f"All values in this report are normalized to {reporting_currency} using exchange "
            f"rates from **{to_date}**."
        )
        lines.append("This eliminates currency fluctuations and shows pure market cap changes.")
        lines.append("")
        lines.extend(_rate_table_lines(snapshot, currencies, reporting_currency))
    else:
        lines.append(
            f"**{FX_NOISE_WARNING}.** No exchange rates were available, so previously stored "
            "converted values were used and changes include currency movements."
        )
    flagged = [comp for comp in comparisons if comp.warnings and comp.fx_normalized]
    if flagged:
        lines.append("")
        lines.append("## Conversion Warnings")
        for comp in flagged:
            lines.append(f"- {comp.ticker}: {'; '.join(comp.warnings)}")
    lines.append("")
    lines.append("---")
    lines.append(f"*Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}*")

    summary_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    LOGGER.info("Summary report exported to %s", summary_path)
    return summary_path


def run_comparison(
    source: QuoteSource,
    from_date: str | date,
    to_date: str | date,
    *,
    output_dir: str | Path = "output",
    export: bool = True,
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY,
) -> ComparisonReport:
    """Compare the exports of two dates found in ``output_dir``."""

    start = parse_date(from_date)
    end = parse_date(to_date)
    if start > end:
        raise ValueError("from_date must be on or before to_date")
    directory = Path(output_dir)
    from_file = find_csv_for_date(directory, start)
    to_file = find_csv_for_date(directory, end)
    LOGGER.info("Comparing market caps from %s (%s) to %s (%s)", start, from_file, end, to_file)

    snapshot = resolve_normalization_snapshot(source, end)
    from_records = read_market_cap_csv(from_file)
    to_records = read_market_cap_csv(to_file)
    comparisons = compare_market_caps(
        from_records, to_records, snapshot, reporting_currency=reporting_currency
    )
    report = ComparisonReport(
        comparisons=comparisons,
        fx_normalized=bool(snapshot),
        currencies=currencies_used(from_records, to_records, reporting_currency=reporting_currency),
    )
    if export:
        report.csv_path = export_comparison_csv(
            comparisons,
            start.isoformat(),
            end.isoformat(),
            output_dir=directory,
            reporting_currency=reporting_currency,
        )
        report.summary_path = export_summary_report(
            comparisons,
            start.isoformat(),
            end.isoformat(),
            snapshot,
            report.currencies,
            output_dir=directory,
            reporting_currency=reporting_currency,
        )
    return report


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--from", dest="start", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--to", dest="end", required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite quote store path",
    )
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        default="output",
        help="Directory holding marketcaps_<date>_*.csv exports; reports are written here",
    )
    parser.add_argument(
        "--reporting-currency",
        dest="reporting_currency",
        default=DEFAULT_REPORTING_CURRENCY,
        type=str.upper,
        help="Currency the comparison is normalised to (default: %(default)s)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    backend = SQLiteBackend(db_path=args.db_path)
    try:
        run_comparison(
            backend,
            args.start,
            args.end,
            output_dir=args.output_dir,
            reporting_currency=args.reporting_currency,
        )
    finally:
        backend.close()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
