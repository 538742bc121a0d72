"""Shared logic for SQL (Postgres/MySQL) backends."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from fx_normalizer.db.base_backend import BackendStrategy
from fx_normalizer.db.sqlite_manager import PersistenceResult
from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS forex_rates (
    symbol VARCHAR(16) NOT NULL,
    as_of BIGINT NOT NULL,
    ask DOUBLE PRECISION NOT NULL,
    bid DOUBLE PRECISION NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(symbol, as_of)
);
"""

EXISTS_SQL = "SELECT 1 FROM forex_rates WHERE symbol = :symbol AND as_of = :as_of"
DELETE_SQL = "DELETE FROM forex_rates WHERE symbol = :symbol AND as_of = :as_of"
INSERT_SQL = """
INSERT INTO forex_rates(symbol, as_of, ask, bid)
VALUES(:symbol, :as_of, :ask, :bid)
"""

LATEST_SQL = """
SELECT f.symbol, f.as_of, f.ask, f.bid
FROM forex_rates f
JOIN (
    SELECT symbol, MAX(as_of) AS as_of
    FROM forex_rates
    {where}
    GROUP BY symbol
) latest ON latest.symbol = f.symbol AND latest.as_of = f.as_of
ORDER BY f.symbol
"""


class RelationalBackend(BackendStrategy):
    """Base class that encapsulates SQLAlchemy Core interactions."""

    schema_sql: str = SCHEMA_SQL

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        engine = self._get_engine()
        with engine.begin() as connection:
            LOGGER.info("Ensuring forex_rates schema exists")
            connection.execute(text("SELECT 1"))
            connection.execute(text(self.schema_sql))

    def insert_quotes(self, rows: Sequence[RateQuote]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        engine = self._get_engine()
        with engine.begin() as connection:
            for row in rows:
                params = {"symbol": row.symbol, "as_of": row.as_of, "ask": row.ask, "bid": row.bid}
                existed = connection.execute(text(EXISTS_SQL), params).first() is not None
                connection.execute(text(DELETE_SQL), params)
                connection.execute(text(INSERT_SQL), params)
                if existed:
                    result.updated += 1
                else:
                    result.inserted += 1
        return result

    def fetch_range(self, start: int | None = None, end: int | None = None) -> list[RateQuote]:
        where_clauses: list[str] = []
        params: dict[str, object] = {}
        if start is not None:
            where_clauses.append("as_of >= :start_ts")
            params["start_ts"] = start
        if end is not None:
            where_clauses.append("as_of <= :end_ts")
            params["end_ts"] = end
        query = "SELECT symbol, as_of, ask, bid FROM forex_rates"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY as_of, symbol"
        with self._get_engine().connect() as connection:
            return [_row_to_quote(row._mapping) for row in connection.execute(text(query), params)]

    def latest_quotes(self, cutoff: int | None = None) -> list[RateQuote]:
        params: dict[str, object] = {}
        where = ""
        if cutoff is not None:
            where = "WHERE as_of <= :cutoff"
            params["cutoff"] = cutoff
        with self._get_engine().connect() as connection:
            rows = connection.execute(text(LATEST_SQL.format(where=where)), params)
            return [_row_to_quote(row._mapping) for row in rows]

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


def _row_to_quote(mapping: Any) -> RateQuote:
    return RateQuote(
        symbol=str(mapping["symbol"]),
        ask=float(mapping["ask"]),
        bid=float(mapping["bid"]),
        as_of=int(mapping["as_of"]),
    )


__all__ = ["RelationalBackend"]
