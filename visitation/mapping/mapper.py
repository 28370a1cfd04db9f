"""Translation between remote rows and domain records.

Rows come back from the store in snake_case, with nullable columns and with
the spelling of whichever schema revision wrote them. The functions here turn
them into typed domain records with defaults filled in, and turn domain values
back into rows for a chosen revision. They are pure: no I/O and no state.
"""

import datetime as dt
from collections.abc import Mapping
from dataclasses import asdict
from functools import partial
from typing import Any

from visitation.mapping.columns import EntityKind, SchemaRevision, columns_for, read_field
from visitation.models.appointment import Appointment
from visitation.models.minister import Minister
from visitation.models.patient import PATIENT_STATUSES, Patient
from visitation.utils.logging import get_logger
from visitation.utils.timestamps import format_timestamp, parse_date, parse_timestamp, utc_now

logger = get_logger(__name__)

Row = dict[str, Any]


def normalize_phones(value: Any) -> list[str]:
    """Always produce an ordered list of phone strings.

    A lone string becomes a one-element list and null becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(phone) for phone in value if phone is not None]


def _timestamp(value: Any) -> dt.datetime:
    # Missing timestamps fall back to "now", which is imprecise but never null
    if value is None or value == "":
        return utc_now()
    return parse_timestamp(value)


def _optional_timestamp(value: Any) -> dt.datetime | None:
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def _serialize(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        return format_timestamp(value)
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, list):
        return list(value)
    return value


def to_row(
    kind: EntityKind, values: Mapping[str, Any], revision: SchemaRevision = SchemaRevision.CURRENT
) -> Row:
    """Translate canonical field values into a row spelled for ``revision``.

    Only the fields present in ``values`` are emitted, so this serves both for
    full inserts and for sparse patches.
    """
    columns = columns_for(kind, revision)
    row: Row = {}
    for field, value in values.items():
        if field not in columns:
            raise KeyError(f"Unknown {kind} field: {field}")
        row[columns[field]] = _serialize(value)
    return row


# Patients


def patient_from_row(row: Mapping[str, Any]) -> Patient:
    """Build a Patient from a row of any known revision."""
    get = partial(read_field, row, EntityKind.PATIENT)

    status = get("status") or "active"
    if status not in PATIENT_STATUSES:
        logger.warning(f"Patient {get('id')} has unknown status {status!r}, treating as active")
        status = "active"

    return Patient(
        id=str(get("id")),
        name=get("name") or "",
        address=get("address") or "",
        district=get("district") or "",
        phones=normalize_phones(get("phones")),
        status=status,
        observations=get("observations") or "",
        created_at=_timestamp(get("created_at")),
        updated_at=_timestamp(get("updated_at")),
    )


def patient_to_row(patient: Patient, revision: SchemaRevision = SchemaRevision.CURRENT) -> Row:
    """Full row for a patient."""
    return to_row(EntityKind.PATIENT, asdict(patient), revision)


# Ministers


def minister_from_row(row: Mapping[str, Any]) -> Minister:
    """Build a Minister from a row of any known revision."""
    get = partial(read_field, row, EntityKind.MINISTER)

    is_active = get("is_active")
    return Minister(
        id=int(get("id")),
        name=get("name") or "",
        phone=get("phone") or "",
        username=get("username") or "",
        password=get("password") or "",
        email=get("email"),
        # Older rows used "minister" for regular accounts
        role="admin" if get("role") == "admin" else "user",
        is_active=True if is_active is None else bool(is_active),
        created_at=_timestamp(get("created_at")),
        updated_at=_timestamp(get("updated_at")),
        last_login=_optional_timestamp(get("last_login")),
    )


def minister_to_row(minister: Minister, revision: SchemaRevision = SchemaRevision.CURRENT) -> Row:
    """Full row for a minister."""
    return to_row(EntityKind.MINISTER, asdict(minister), revision)


# Appointments


def appointment_from_row(row: Mapping[str, Any]) -> Appointment:
    """Build an Appointment from a row."""
    get = partial(read_field, row, EntityKind.APPOINTMENT)

    created_at = _timestamp(get("created_at"))
    raw_date = get("date")
    return Appointment(
        id=int(get("id")),
        patient_id=str(get("patient_id") or ""),
        minister_id=int(get("minister_id") or 0),
        minister_name=get("minister_name") or "",
        date=parse_date(raw_date) if raw_date else created_at.date(),
        notes=get("notes"),
        created_at=created_at,
    )


def appointment_to_row(appointment: Appointment, revision: SchemaRevision = SchemaRevision.CURRENT) -> Row:
    """Full row for an appointment."""
    return to_row(EntityKind.APPOINTMENT, asdict(appointment), revision)
