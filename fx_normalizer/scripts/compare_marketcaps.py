"""CLI entry point for the FX-normalised market-cap comparison."""

from __future__ import annotations

from fx_normalizer.reporting.comparison import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
