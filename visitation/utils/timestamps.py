"""Timestamp helpers shared by the mapper and the services."""

from datetime import UTC, date, datetime, timedelta

RESOLUTION = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Current time, nudged forward so it is strictly later than ``previous``."""
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + RESOLUTION
    return now


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp from the backend into an aware datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime for the backend."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def parse_date(value: str | date) -> date:
    """Parse a calendar date, dropping any time component."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])
