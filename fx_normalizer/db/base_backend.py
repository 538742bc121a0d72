"""Backend strategy interfaces for the quote store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from fx_normalizer.db.sqlite_manager import PersistenceResult, latest_per_symbol
from fx_normalizer.ingestion.models import RateQuote


class BackendStrategy(ABC):
    """Common interface implemented by every database backend."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def insert_quotes(self, rows: Sequence[RateQuote]) -> PersistenceResult:
        """Insert or update quotes in bulk, keyed by ``(symbol, as_of)``."""

    @abstractmethod
    def fetch_range(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> list[RateQuote]:
        """Return quotes whose ``as_of`` falls within the inclusive bounds."""

    def latest_quotes(self, cutoff: int | None = None) -> list[RateQuote]:
        """Return the newest quote per symbol at or before ``cutoff``."""

        return latest_per_symbol(self.fetch_range(end=cutoff))

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy"]
