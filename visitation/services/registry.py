"""Construction of the service graph from settings."""

from dataclasses import dataclass

from visitation.clients.persistence import InMemoryPersistenceClient, PersistenceClient
from visitation.clients.postgrest import PostgrestConfig, PostgrestPersistenceClient
from visitation.config import Settings, get_settings
from visitation.mapping.columns import EntityKind
from visitation.services.appointments import AppointmentService
from visitation.services.auth import AuthGate
from visitation.services.ministers import MinisterService
from visitation.services.patients import PatientService
from visitation.services.reports import ReportService
from visitation.services.session_manager import InMemorySessionManager
from visitation.services.session_store import FileSessionStore, InMemorySessionStore
from visitation.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    """Every service the application uses, sharing one persistence client."""

    settings: Settings
    client: PersistenceClient
    patients: PatientService
    ministers: MinisterService
    appointments: AppointmentService
    reports: ReportService
    sessions: InMemorySessionManager

    @property
    def tables(self) -> dict[EntityKind, str]:
        return {
            EntityKind.PATIENT: self.patients.table,
            EntityKind.MINISTER: self.ministers.table,
            EntityKind.APPOINTMENT: self.appointments.table,
        }

    def local_gate(self) -> AuthGate:
        """Gate for a single local user, remembered across runs in ``settings.session_file``."""
        return AuthGate(self.ministers, FileSessionStore(self.settings.session_file))


def create_client(settings: Settings) -> PersistenceClient:
    """Build the persistence client selected by ``settings.backend``."""
    if settings.backend == "postgrest":
        logger.info(f"Using PostgREST backend at {settings.postgrest_url}")
        return PostgrestPersistenceClient(
            PostgrestConfig(
                base_url=settings.postgrest_url,
                api_key=settings.postgrest_api_key,
                timeout=settings.request_timeout,
            )
        )

    logger.info("Using in-memory backend")
    return InMemoryPersistenceClient(
        auto_increment_tables={settings.ministers_table, settings.appointments_table},
        unique_columns={settings.ministers_table: ("username",)},
    )


def build_services(settings: Settings, client: PersistenceClient | None = None) -> Services:
    """Wire the services together.

    Args:
        settings: Application settings
        client: Persistence client to use instead of the configured one
    """
    if client is None:
        client = create_client(settings)
    revision = settings.write_revision

    patients = PatientService(client, settings.patients_table, revision)
    ministers = MinisterService(client, settings.ministers_table, revision)
    appointments = AppointmentService(client, settings.appointments_table, revision)

    return Services(
        settings=settings,
        client=client,
        patients=patients,
        ministers=ministers,
        appointments=appointments,
        reports=ReportService(patients),
        sessions=InMemorySessionManager(
            gate_factory=lambda: AuthGate(ministers, InMemorySessionStore()),
            session_timeout_minutes=settings.session_timeout_minutes,
        ),
    )


_services: Services | None = None


def get_services() -> Services:
    """Get or create the services instance."""
    global _services
    if _services is None:
        _services = build_services(get_settings())
    return _services
