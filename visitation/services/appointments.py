"""Visit appointment service."""

import datetime as dt

from visitation.clients.persistence import PersistenceClient
from visitation.exceptions import NotFoundError
from visitation.mapping.columns import EntityKind, SchemaRevision, column_name
from visitation.mapping.mapper import appointment_from_row, to_row
from visitation.models.appointment import Appointment, AppointmentInput, AppointmentUpdate
from visitation.services.base import log_failures, newest_first
from visitation.utils.logging import get_logger
from visitation.utils.timestamps import utc_now

logger = get_logger(__name__)


class AppointmentService:
    """Schedule, query and cancel visits.

    Scheduling does not look for an existing visit of the same patient on the
    same date. Callers that want to avoid double booking check with
    ``is_patient_booked`` first, which leaves a window between the check and
    the insert.
    """

    def __init__(
        self,
        client: PersistenceClient,
        table: str = "appointments",
        revision: SchemaRevision = SchemaRevision.CURRENT,
    ):
        self.client = client
        self.table = table
        self.revision = revision

    def _column(self, field: str) -> str:
        return column_name(EntityKind.APPOINTMENT, field, self.revision)

    async def _select(self, action: str, filters: dict | None = None) -> list[Appointment]:
        with log_failures(logger, action):
            rows = await self.client.select(self.table, filters)
        return newest_first([appointment_from_row(row) for row in rows])

    async def list_all(self) -> list[Appointment]:
        """All appointments, newest first."""
        return await self._select("list appointments")

    async def get_by_id(self, appointment_id: int) -> Appointment | None:
        """Get an appointment by id, or None."""
        found = await self._select(f"fetch appointment {appointment_id}", {self._column("id"): appointment_id})
        return found[0] if found else None

    async def get_appointments_by_date(self, day: dt.date) -> list[Appointment]:
        """Appointments on a calendar date."""
        return await self._select(f"list appointments on {day}", {self._column("date"): day.isoformat()})

    async def get_appointments_by_patient(self, patient_id: str) -> list[Appointment]:
        """Appointments of one patient."""
        return await self._select(
            f"list appointments of patient {patient_id}", {self._column("patient_id"): patient_id}
        )

    async def get_appointments_for(self, patient_id: str, minister_id: int) -> list[Appointment]:
        """Appointments pairing a patient with a minister, used to pick one to cancel."""
        filters = {self._column("patient_id"): patient_id, self._column("minister_id"): minister_id}
        return await self._select(f"list appointments of patient {patient_id} with minister {minister_id}", filters)

    async def is_patient_booked(self, patient_id: str, day: dt.date) -> bool:
        """Whether the patient already has a visit on ``day``. Advisory only."""
        return any(apt.patient_id == patient_id for apt in await self.get_appointments_by_date(day))

    async def create(self, data: AppointmentInput) -> Appointment:
        """Insert an appointment. The backend assigns the id."""
        values = {**data.model_dump(), "created_at": utc_now()}

        with log_failures(logger, f"schedule visit for patient {data.patient_id}"):
            row = await self.client.insert(self.table, [to_row(EntityKind.APPOINTMENT, values, self.revision)])

        created = appointment_from_row(row)
        logger.info(
            f"Scheduled appointment {created.id}: patient {created.patient_id}, "
            f"minister {created.minister_id}, {created.date}"
        )
        return created

    async def schedule_visit(self, data: AppointmentInput) -> Appointment:
        """Schedule a visit. Same as ``create``."""
        return await self.create(data)

    async def update(self, appointment_id: int, patch: AppointmentUpdate) -> Appointment:
        """Apply the fields set on ``patch``.

        Raises:
            NotFoundError: If there is no such appointment
        """
        changes = patch.changes()
        if not changes:
            return await self.require(appointment_id)

        with log_failures(logger, f"update appointment {appointment_id}"):
            row = await self.client.update(
                self.table,
                to_row(EntityKind.APPOINTMENT, changes, self.revision),
                {self._column("id"): appointment_id},
            )
        if row is None:
            raise NotFoundError("Appointment", appointment_id)
        return appointment_from_row(row)

    async def require(self, appointment_id: int) -> Appointment:
        """Get an appointment by id.

        Raises:
            NotFoundError: If there is no such appointment
        """
        appointment = await self.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    async def delete(self, appointment_id: int) -> None:
        """Cancel an appointment.

        Raises:
            NotFoundError: If there is no such appointment
        """
        with log_failures(logger, f"cancel appointment {appointment_id}"):
            deleted = await self.client.delete(self.table, {self._column("id"): appointment_id})
        if not deleted:
            raise NotFoundError("Appointment", appointment_id)
        logger.info(f"Cancelled appointment {appointment_id}")
