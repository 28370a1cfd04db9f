"""Application settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from visitation.mapping.columns import SchemaRevision

TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime configuration.

    Every field can be overridden with a ``VISITATION_*`` environment variable,
    see ``Settings.from_env``.
    """

    backend: Literal["memory", "postgrest"] = "memory"
    postgrest_url: str = ""
    postgrest_api_key: str = ""
    request_timeout: float = 10.0

    patients_table: str = "patients"
    ministers_table: str = "ministers"
    appointments_table: str = "appointments"

    # Column spelling used when writing rows
    write_revision: SchemaRevision = SchemaRevision.CURRENT

    session_file: Path = Path.home() / ".visitation" / "session.json"
    session_timeout_minutes: int = 60

    seed_demo: bool = False
    log_level: str = "INFO"

    @property
    def seeds_demo_data(self) -> bool:
        """Demo records are only seeded into the in-memory backend, which starts empty."""
        return self.seed_demo and self.backend == "memory"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``VISITATION_*`` environment variables."""
        defaults = cls()
        backend = os.getenv("VISITATION_BACKEND", defaults.backend).lower()
        if backend not in ("memory", "postgrest"):
            raise ValueError(f"Unknown VISITATION_BACKEND: {backend}")

        return cls(
            backend=backend,  # type: ignore[arg-type]
            postgrest_url=os.getenv("VISITATION_POSTGREST_URL", defaults.postgrest_url),
            postgrest_api_key=os.getenv("VISITATION_POSTGREST_API_KEY", defaults.postgrest_api_key),
            request_timeout=float(os.getenv("VISITATION_REQUEST_TIMEOUT", defaults.request_timeout)),
            patients_table=os.getenv("VISITATION_PATIENTS_TABLE", defaults.patients_table),
            ministers_table=os.getenv("VISITATION_MINISTERS_TABLE", defaults.ministers_table),
            appointments_table=os.getenv("VISITATION_APPOINTMENTS_TABLE", defaults.appointments_table),
            write_revision=SchemaRevision(os.getenv("VISITATION_WRITE_REVISION", defaults.write_revision.value)),
            session_file=Path(os.getenv("VISITATION_SESSION_FILE", str(defaults.session_file))),
            session_timeout_minutes=int(
                os.getenv("VISITATION_SESSION_TIMEOUT_MINUTES", defaults.session_timeout_minutes)
            ),
            seed_demo=os.getenv("VISITATION_SEED_DEMO", "").lower() in TRUTHY,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
