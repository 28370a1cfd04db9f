"""Minister data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from visitation.utils.timestamps import format_timestamp, parse_timestamp, utc_now

MinisterRole = Literal["admin", "user"]


@dataclass
class Minister:
    """A visiting volunteer or administrator account."""

    id: int
    name: str
    phone: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    email: str | None = None
    role: MinisterRole = "user"
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    last_login: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def as_session_record(self) -> dict[str, Any]:
        """Serializable form kept in the session slot. Never includes the password."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "last_login": format_timestamp(self.last_login) if self.last_login else None,
        }

    @classmethod
    def from_session_record(cls, record: dict[str, Any]) -> "Minister":
        """Rebuild a minister from a stored session record.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        role = record.get("role", "user")
        if role not in ("admin", "user"):
            raise ValueError(f"Unknown role in session record: {role}")
        return cls(
            id=int(record["id"]),
            name=str(record["name"]),
            phone=record.get("phone") or "",
            username=str(record["username"]),
            email=record.get("email"),
            role=role,
            is_active=bool(record.get("is_active", True)),
            created_at=parse_timestamp(record["created_at"]) if record.get("created_at") else utc_now(),
            updated_at=parse_timestamp(record["updated_at"]) if record.get("updated_at") else utc_now(),
            last_login=parse_timestamp(record["last_login"]) if record.get("last_login") else None,
        )


class MinisterInput(BaseModel):
    """Data collected by the minister management form."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Pedro Alves"])
    phone: str = Field(..., min_length=1, max_length=40, examples=["9999-1111"])
    email: str | None = None
    username: str = Field(..., min_length=1, max_length=80, examples=["pedro"])
    password: str = Field(..., min_length=1, max_length=200)
    role: MinisterRole = "user"
    is_active: bool = True

    @field_validator("name", "phone", "username")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace only")
        return v.strip()


class MinisterUpdate(BaseModel):
    """Sparse patch for a minister. Only explicitly set fields are applied."""

    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, min_length=1, max_length=40)
    email: str | None = None
    username: str | None = Field(None, min_length=1, max_length=80)
    password: str | None = Field(None, min_length=1, max_length=200)
    role: MinisterRole | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "MinisterUpdate":
        for name in ("name", "phone", "username", "password", "role", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided."""
        return self.model_dump(exclude_unset=True)
