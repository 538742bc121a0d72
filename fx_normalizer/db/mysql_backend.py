"""MySQL backend strategy."""

from __future__ import annotations

from fx_normalizer.db.relational_backend import RelationalBackend


class MySQLBackend(RelationalBackend):
    """Concrete relational backend for MySQL engines."""

    schema_sql = """
CREATE TABLE IF NOT EXISTS forex_rates (
    symbol VARCHAR(16) NOT NULL,
    as_of BIGINT NOT NULL,
    ask DOUBLE NOT NULL,
    bid DOUBLE NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(symbol, as_of)
);
"""


__all__ = ["MySQLBackend"]
