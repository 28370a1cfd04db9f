"""Shared helpers for the entity services."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from logging import Logger
from typing import Protocol, TypeVar

from visitation.exceptions import PersistenceError


class HasCreatedAt(Protocol):
    created_at: datetime


RecordT = TypeVar("RecordT", bound=HasCreatedAt)


@contextmanager
def log_failures(logger: Logger, action: str) -> Iterator[None]:
    """Log a persistence failure and let it propagate unchanged."""
    try:
        yield
    except PersistenceError as e:
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise


def newest_first(records: list[RecordT]) -> list[RecordT]:
    """Stable sort by ``created_at``, most recent first."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)
