"""Helpers for working with the bundled SQLite quote store."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH"]

# Resolved relative to this package so the default store does not depend on
# the working directory.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("quotes.db")
