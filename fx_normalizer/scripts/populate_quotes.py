"""CLI entry point for fetching provider quotes into the store."""

from __future__ import annotations

from fx_normalizer.seeds.populate_quotes import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
