"""Appointment data models."""

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from visitation.utils.timestamps import parse_date, utc_now


@dataclass
class Appointment:
    """A scheduled visit of one minister to one patient on a date."""

    id: int
    patient_id: str
    minister_id: int
    minister_name: str
    date: dt.date
    notes: str | None = None
    created_at: dt.datetime = field(default_factory=utc_now)


class AppointmentInput(BaseModel):
    """Data collected by the scheduling form."""

    patient_id: str = Field(..., min_length=1)
    minister_id: int
    minister_name: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    notes: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def drop_time(cls, v: Any) -> Any:
        """Accept full timestamps and keep only the calendar date."""
        if isinstance(v, str | dt.date):
            return parse_date(v)
        return v


class AppointmentUpdate(BaseModel):
    """Sparse patch for an appointment."""

    minister_id: int | None = None
    minister_name: str | None = Field(None, min_length=1, max_length=200)
    date: dt.date | None = None
    notes: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def drop_time(cls, v: Any) -> Any:
        if isinstance(v, str | dt.date):
            return parse_date(v)
        return v

    @model_validator(mode="after")
    def reject_null_required(self) -> "AppointmentUpdate":
        for name in ("minister_id", "minister_name", "date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided."""
        return self.model_dump(exclude_unset=True)
