"""Request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from visitation.models.minister import Minister, MinisterRole
from visitation.models.patient import Patient


class LoginRequest(BaseModel):
    """Request model for login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class MinisterResponse(BaseModel):
    """A minister as shown to API clients. Never carries the password."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    email: str | None = None
    username: str
    role: MinisterRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None

    @classmethod
    def from_minister(cls, minister: Minister) -> "MinisterResponse":
        return cls.model_validate(minister)


class SessionResponse(BaseModel):
    """Response model for the current session."""

    session_id: str
    authenticated: bool
    is_admin: bool
    minister: MinisterResponse | None = None
    permissions: list[str] = []


class AvailabilityResponse(BaseModel):
    """Response model for the double booking pre-check."""

    patient_id: str
    date: str
    booked: bool


class ReportResponse(BaseModel):
    """Response model for patient reports."""

    kind: str
    title: str
    generated_at: datetime
    total: int
    patients: list[Patient]
    districts: dict[str, int] | None = None


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
    backend: str
    sessions: int
