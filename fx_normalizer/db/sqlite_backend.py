"""SQLite backend strategy implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fx_normalizer.db import DEFAULT_SQLITE_DB_PATH
from fx_normalizer.db.base_backend import BackendStrategy
from fx_normalizer.db.sqlite_manager import PersistenceResult, SQLiteManager
from fx_normalizer.ingestion.models import RateQuote


class SQLiteBackend(BackendStrategy):
    """Backend strategy that stores quotes in the bundled SQLite database."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the schema in its constructor.
        return None

    def insert_quotes(self, rows: Sequence[RateQuote]) -> PersistenceResult:
        return self.manager.insert_quotes(rows)

    def fetch_range(self, start: int | None = None, end: int | None = None) -> list[RateQuote]:
        return self.manager.fetch_range(start, end)

    def latest_quotes(self, cutoff: int | None = None) -> list[RateQuote]:
        return self.manager.latest_quotes(cutoff)

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
