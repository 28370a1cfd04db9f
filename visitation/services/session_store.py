"""Persistence slot for the authenticated minister."""

import json
from pathlib import Path
from typing import Any, Protocol

from visitation.utils.logging import get_logger

logger = get_logger(__name__)


class SessionStore(Protocol):
    """A single durable slot holding the serialized session record."""

    def load(self) -> dict[str, Any] | None:
        """Read the stored record.

        Returns:
            The record, or None if the slot is empty

        Raises:
            ValueError: If the slot holds something that is not a record
        """
        ...

    def save(self, record: dict[str, Any]) -> None:
        """Replace the stored record."""
        ...

    def clear(self) -> None:
        """Empty the slot."""
        ...


class InMemorySessionStore:
    """Session slot kept in process memory."""

    def __init__(self, record: dict[str, Any] | None = None):
        self.record = dict(record) if record is not None else None

    def load(self) -> dict[str, Any] | None:
        return dict(self.record) if self.record is not None else None

    def save(self, record: dict[str, Any]) -> None:
        self.record = dict(record)

    def clear(self) -> None:
        self.record = None


class FileSessionStore:
    """Session slot stored as a JSON file on the local machine."""

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: File holding the record, created on first save
        """
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            record = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt session file {self.path}: {e}") from e
        if not isinstance(record, dict):
            raise ValueError(f"Session file {self.path} does not hold a record")
        return record

    def save(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(record), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug(f"Saved session to {self.path}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
