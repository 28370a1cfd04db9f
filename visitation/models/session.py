"""API session state."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from visitation.services.auth import AuthGate
from visitation.utils.timestamps import format_timestamp, utc_now


@dataclass
class Session:
    """One API client and the gate tracking who it is logged in as."""

    session_id: str
    gate: AuthGate
    created_at: datetime = field(default_factory=utc_now)
    last_activity: datetime = field(default_factory=utc_now)

    def as_dict(self) -> dict[str, Any]:
        minister = self.gate.minister
        return {
            "session_id": self.session_id,
            "minister_id": minister.id if minister else None,
            "authenticated": self.gate.is_authenticated,
            "created_at": format_timestamp(self.created_at),
            "last_activity": format_timestamp(self.last_activity),
        }

    def update_activity(self) -> None:
        self.last_activity = utc_now()
