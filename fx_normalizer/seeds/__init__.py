"""Database seeding utilities for :mod:`fx_normalizer`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["seed_quotes", "update_exchange_rates"]

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from fx_normalizer.seeds.populate_quotes import seed_quotes as seed_quotes
    from fx_normalizer.seeds.populate_quotes import update_exchange_rates as update_exchange_rates


def __getattr__(name: str) -> Any:
    """Lazily expose seed helpers so importing the package stays cheap."""

    if name in {"seed_quotes", "update_exchange_rates"}:
        from fx_normalizer.seeds import populate_quotes

        return getattr(populate_quotes, name)
    raise AttributeError(f"module 'fx_normalizer.seeds' has no attribute {name}")
