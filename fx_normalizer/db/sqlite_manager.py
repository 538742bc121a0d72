"""SQLAlchemy-backed persistence for forex quotes in the bundled SQLite store."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence, cast

from sqlalchemy import Column, DateTime, Float, Integer, String, and_, create_engine, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_normalizer.db import DEFAULT_SQLITE_DB_PATH
from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _ForexQuote(Base):
    __tablename__ = "forex_rates"

    symbol = Column(String, primary_key=True)
    as_of = Column(Integer, primary_key=True)
    ask = Column(Float, nullable=False)
    bid = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))

    def to_record(self) -> RateQuote:
        return RateQuote(
            symbol=cast(str, self.symbol),
            ask=cast(float, self.ask),
            bid=cast(float, self.bid),
            as_of=cast(int, self.as_of),
        )


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many rows were inserted or updated in a batch."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected rows."""

        return self.inserted + self.updated


def latest_per_symbol(rows: Iterable[RateQuote]) -> list[RateQuote]:
    """Keep the newest quote per symbol, ordered by symbol."""

    latest: dict[str, RateQuote] = {}
    for row in rows:
        current = latest.get(row.symbol)
        if current is None or row.as_of > current.as_of:
            latest[row.symbol] = row
    return [latest[symbol] for symbol in sorted(latest)]


class SQLiteManager:
    """Quote store backed by a local SQLite file through the SQLAlchemy ORM."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )

    def insert_quotes(self, rows: Sequence[RateQuote]) -> PersistenceResult:
        result = PersistenceResult()
        with self._SessionFactory() as session:
            for row in rows:
                existing = session.get(_ForexQuote, {"symbol": row.symbol, "as_of": row.as_of})
                if existing is None:
                    session.add(
                        _ForexQuote(symbol=row.symbol, as_of=row.as_of, ask=row.ask, bid=row.bid)
                    )
                    result.inserted += 1
                else:
                    setattr(existing, "ask", row.ask)
                    setattr(existing, "bid", row.bid)
                    result.updated += 1
            session.commit()
        LOGGER.info(
            "Inserted %s quotes, updated %s quotes (total %s)",
            result.inserted,
            result.updated,
            result.total,
        )
        return result

    def fetch_range(self, start: int | None = None, end: int | None = None) -> list[RateQuote]:
        with self._SessionFactory() as session:
            stmt = select(_ForexQuote).order_by(_ForexQuote.as_of, _ForexQuote.symbol)
            if start is not None:
                stmt = stmt.where(_ForexQuote.as_of >= start)
            if end is not None:
                stmt = stmt.where(_ForexQuote.as_of <= end)
            return [cast(_ForexQuote, row).to_record() for row in session.execute(stmt).scalars()]

    def latest_quotes(self, cutoff: int | None = None) -> list[RateQuote]:
        """Return the newest quote per symbol at or before ``cutoff``."""

        latest = select(
            _ForexQuote.symbol.label("symbol"),
            func.max(_ForexQuote.as_of).label("as_of"),
        ).group_by(_ForexQuote.symbol)
        if cutoff is not None:
            latest = latest.where(_ForexQuote.as_of <= cutoff)
        latest_subquery = latest.subquery()
        stmt = (
            select(_ForexQuote)
            .join(
                latest_subquery,
                and_(
                    _ForexQuote.symbol == latest_subquery.c.symbol,
                    _ForexQuote.as_of == latest_subquery.c.as_of,
                ),
            )
            .order_by(_ForexQuote.symbol)
        )
        with self._SessionFactory() as session:
            return [cast(_ForexQuote, row).to_record() for row in session.execute(stmt).scalars()]

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["PersistenceResult", "SQLiteManager", "latest_per_symbol"]
