"""CLI + helpers for populating the quote store from the market-data provider."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Protocol, Sequence

from fx_normalizer.db import DEFAULT_SQLITE_DB_PATH
from fx_normalizer.db.base_backend import BackendStrategy
from fx_normalizer.db.sqlite_backend import SQLiteBackend
from fx_normalizer.db.sqlite_manager import PersistenceResult
from fx_normalizer.ingestion.fmp import FMPForexClient
from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["QuoteFetcher", "update_exchange_rates", "seed_quotes", "parse_args", "main"]


class QuoteFetcher(Protocol):
    def fetch_quotes(self, as_of: int | None = None) -> list[RateQuote]:
        ...  # pragma: no cover - protocol definition


def update_exchange_rates(
    client: QuoteFetcher,
    backend: BackendStrategy,
    *,
    as_of: int | None = None,
    dry_run: bool = False,
) -> PersistenceResult:
    """Fetch current quotes through ``client`` and upsert them into ``backend``.

    Provider failures propagate so the caller can decide whether to retry;
    nothing is written in that case.
    """

    quotes = client.fetch_quotes(as_of)
    if dry_run:
        LOGGER.info("Dry-run enabled; skipping insert of %s quotes", len(quotes))
        return PersistenceResult()
    backend.ensure_schema()
    result = backend.insert_quotes(quotes)
    LOGGER.info(
        "Exchange rates updated: inserted %s quotes, updated %s quotes (total %s)",
        result.inserted,
        result.updated,
        result.total,
    )
    return result


def seed_quotes(
    *,
    db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
    api_key: str | None = None,
    client: QuoteFetcher | None = None,
    dry_run: bool = False,
) -> PersistenceResult:
    """Fetch provider quotes into the SQLite store at ``db_path``."""

    fetcher = client or FMPForexClient(api_key)
    backend = SQLiteBackend(db_path=db_path)
    try:
        return update_exchange_rates(fetcher, backend, dry_run=dry_run)
    finally:
        backend.close()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite database path",
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        help="Provider API key (defaults to FINANCIALMODELINGPREP_API_KEY)",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Fetch quotes but do not write them",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    seed_quotes(db_path=args.db_path, api_key=args.api_key, dry_run=args.dry_run)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
