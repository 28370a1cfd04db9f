"""Versioned column translation tables.

The hosted tables went through more than one schema revision and some column
names changed spelling between them (``distric`` became ``district``,
``update_at`` became ``updated_at``, ``lasLogin`` became ``last_login``). Each
revision is described here as a mapping from canonical field name to remote
column name. Reads accept the spelling of any known revision, writes use one.
"""

from collections.abc import Iterator, Mapping
from enum import StrEnum
from typing import Any


class SchemaRevision(StrEnum):
    """Known revisions of the remote schema."""

    LEGACY = "legacy"
    CURRENT = "current"


class EntityKind(StrEnum):
    """Entity kinds stored in remote tables."""

    PATIENT = "patient"
    MINISTER = "minister"
    APPOINTMENT = "appointment"


def _identity(*fields: str) -> dict[str, str]:
    return {field: field for field in fields}


_CURRENT_COLUMNS: dict[EntityKind, dict[str, str]] = {
    EntityKind.PATIENT: _identity(
        "id", "name", "address", "district", "phones", "status", "observations", "created_at", "updated_at"
    ),
    EntityKind.MINISTER: _identity(
        "id",
        "name",
        "phone",
        "email",
        "username",
        "password",
        "role",
        "is_active",
        "created_at",
        "updated_at",
        "last_login",
    ),
    EntityKind.APPOINTMENT: _identity(
        "id", "patient_id", "minister_id", "minister_name", "date", "notes", "created_at"
    ),
}

_LEGACY_OVERRIDES: dict[EntityKind, dict[str, str]] = {
    EntityKind.PATIENT: {"district": "distric", "updated_at": "update_at"},
    EntityKind.MINISTER: {"updated_at": "update_at", "last_login": "lasLogin", "is_active": "isActive"},
    EntityKind.APPOINTMENT: {},
}

COLUMN_TABLES: dict[SchemaRevision, dict[EntityKind, dict[str, str]]] = {
    SchemaRevision.CURRENT: _CURRENT_COLUMNS,
    SchemaRevision.LEGACY: {
        kind: {**columns, **_LEGACY_OVERRIDES[kind]} for kind, columns in _CURRENT_COLUMNS.items()
    },
}

# Newest spelling wins when a row carries more than one
READ_PREFERENCE: tuple[SchemaRevision, ...] = (SchemaRevision.CURRENT, SchemaRevision.LEGACY)


def columns_for(kind: EntityKind, revision: SchemaRevision = SchemaRevision.CURRENT) -> Mapping[str, str]:
    """Canonical field to remote column mapping for one revision."""
    return COLUMN_TABLES[revision][kind]


def column_name(kind: EntityKind, field: str, revision: SchemaRevision = SchemaRevision.CURRENT) -> str:
    """Remote column holding ``field`` in ``revision``."""
    return COLUMN_TABLES[revision][kind][field]


def candidate_columns(kind: EntityKind, field: str) -> Iterator[str]:
    """Every known spelling of ``field``, in read preference order."""
    seen: set[str] = set()
    for revision in READ_PREFERENCE:
        column = COLUMN_TABLES[revision][kind][field]
        if column not in seen:
            seen.add(column)
            yield column


def read_field(row: Mapping[str, Any], kind: EntityKind, field: str) -> Any:
    """Read ``field`` from a remote row whatever revision spelled it.

    Returns the first non-null value among the known spellings, or None.
    """
    for column in candidate_columns(kind, field):
        value = row.get(column)
        if value is not None:
            return value
    return None


def legacy_columns(kind: EntityKind, revision: SchemaRevision = SchemaRevision.CURRENT) -> dict[str, str]:
    """Columns spelled differently from ``revision``, as legacy column to target column."""
    target = COLUMN_TABLES[revision][kind]
    legacy: dict[str, str] = {}
    for other, tables in COLUMN_TABLES.items():
        if other == revision:
            continue
        for field, column in tables[kind].items():
            if column != target[field]:
                legacy[column] = target[field]
    return legacy
