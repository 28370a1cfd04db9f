"""Patient data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from visitation.utils.timestamps import utc_now

PatientStatus = Literal["active", "recovered", "deceased"]
PATIENT_STATUSES: tuple[str, ...] = ("active", "recovered", "deceased")

MAX_PHONES = 3


@dataclass
class Patient:
    """A visit recipient."""

    id: str
    name: str
    address: str = ""
    district: str = ""
    phones: list[str] = field(default_factory=list)
    status: PatientStatus = "active"
    observations: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


def _clean_phones(phones: list[str]) -> list[str]:
    cleaned = [phone.strip() for phone in phones if phone and phone.strip()]
    if not cleaned:
        raise ValueError("At least one phone number is required")
    return cleaned


class PatientInput(BaseModel):
    """Data collected by the new patient form."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Maria da Silva"])
    address: str = Field("", max_length=300, examples=["Rua das Flores, 123"])
    district: str = Field("", max_length=100, examples=["Centro"])
    phones: list[str] = Field(
        ...,
        max_length=MAX_PHONES,
        description="Up to three phone numbers, blank entries are dropped",
        examples=[["1234-5678", "", ""]],
    )
    status: PatientStatus = "active"
    observations: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace only")
        return v.strip()

    @field_validator("phones")
    @classmethod
    def validate_phones(cls, v: list[str]) -> list[str]:
        """Drop blank phone slots and require at least one number."""
        return _clean_phones(v)


class PatientUpdate(BaseModel):
    """Sparse patch for a patient.

    Only fields that were explicitly set are applied, so a field cleared to an
    empty string is different from a field left out.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = Field(None, max_length=300)
    district: str | None = Field(None, max_length=100)
    phones: list[str] | None = Field(None, max_length=MAX_PHONES)
    status: PatientStatus | None = None
    observations: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Name cannot be empty or whitespace only")
        return v.strip() if v is not None else v

    @field_validator("phones")
    @classmethod
    def validate_phones(cls, v: list[str] | None) -> list[str] | None:
        return _clean_phones(v) if v is not None else v

    @model_validator(mode="after")
    def reject_null_required(self) -> "PatientUpdate":
        """Name, phones and status can be changed but never cleared."""
        for name in ("name", "phones", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided, with cleared text normalized to ``""``."""
        return {key: "" if value is None else value for key, value in self.model_dump(exclude_unset=True).items()}
