"""Helpers for turning report dates into the unix timestamps used by the quote store."""

from __future__ import annotations

from datetime import date, datetime, time, timezone


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def date_to_timestamp(value: str | date) -> int:
    """Return midnight UTC of ``value`` as unix seconds."""

    day = parse_date(value)
    return int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp())


def to_timestamp(value: str | date | datetime | int | None) -> int | None:
    """Normalise the different as-of representations accepted by the facade.

    Naive datetimes are treated as UTC. Plain dates resolve to midnight UTC.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("as_of must be a date, datetime, ISO string or unix timestamp")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    return date_to_timestamp(value)


def now_timestamp() -> int:
    return int(datetime.now(timezone.utc).timestamp())


__all__ = ["date_to_timestamp", "now_timestamp", "parse_date", "to_timestamp"]
