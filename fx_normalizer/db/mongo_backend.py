"""MongoDB backend strategy."""

from __future__ import annotations

from typing import Any, Sequence

from pymongo import MongoClient, UpdateOne
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from fx_normalizer.db.base_backend import BackendStrategy
from fx_normalizer.db.sqlite_manager import PersistenceResult
from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)

COLLECTION_NAME = "forex_rates"


class MongoBackend(BackendStrategy):
    """Backend strategy that persists forex quotes inside MongoDB."""

    def __init__(self, url: str, *, database: str | None = None) -> None:
        self.url = url
        self._client = MongoClient(url)
        db = self._client.get_default_database() if database is None else self._client[database]
        if db is None:
            raise ValueError("MongoDB connection URI must include a database name")
        self._collection: Collection = db[COLLECTION_NAME]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB forex quote collection exists")
            self._client.admin.command("ping")
            self._collection.create_index([("symbol", 1), ("as_of", 1)], unique=True)
        except PyMongoError as exc:  # pragma: no cover - error path
            raise RuntimeError(f"Failed to ensure MongoDB schema: {exc}") from exc

    def insert_quotes(self, rows: Sequence[RateQuote]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        operations = [
            UpdateOne(
                {"symbol": row.symbol, "as_of": row.as_of},
                {"$set": {"symbol": row.symbol, "as_of": row.as_of, "ask": row.ask, "bid": row.bid}},
                upsert=True,
            )
            for row in rows
        ]
        try:
            outcome = self._collection.bulk_write(operations, ordered=False)
        except PyMongoError as exc:  # pragma: no cover - error path
            raise RuntimeError(f"Failed to insert MongoDB quotes: {exc}") from exc
        result.inserted += outcome.upserted_count
        result.updated += outcome.matched_count
        return result

    def fetch_range(self, start: int | None = None, end: int | None = None) -> list[RateQuote]:
        query: dict[str, Any] = {}
        if start is not None or end is not None:
            range_query: dict[str, int] = {}
            if start is not None:
                range_query["$gte"] = start
            if end is not None:
                range_query["$lte"] = end
            query["as_of"] = range_query
        try:
            docs = self._collection.find(query).sort("as_of", 1)
            return [
                RateQuote(
                    symbol=str(doc["symbol"]),
                    ask=float(doc["ask"]),
                    bid=float(doc.get("bid", doc["ask"])),
                    as_of=int(doc["as_of"]),
                )
                for doc in docs
            ]
        except PyMongoError as exc:  # pragma: no cover - error path
            raise RuntimeError(f"Failed to read MongoDB quotes: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


__all__ = ["MongoBackend"]
