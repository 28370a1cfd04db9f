"""Patient record service."""

import uuid

from visitation.clients.persistence import PersistenceClient
from visitation.exceptions import NotFoundError
from visitation.mapping.columns import EntityKind, SchemaRevision, column_name
from visitation.mapping.mapper import patient_from_row, patient_to_row, to_row
from visitation.models.patient import Patient, PatientInput, PatientStatus, PatientUpdate
from visitation.services.base import log_failures, newest_first
from visitation.utils.logging import get_logger
from visitation.utils.timestamps import next_timestamp, utc_now

logger = get_logger(__name__)


class PatientService:
    """Create, read, update and delete patients in the remote store.

    Inputs are trusted: validation happens when the input models are built.
    Persistence errors are logged and re-raised, never retried.
    """

    def __init__(
        self,
        client: PersistenceClient,
        table: str = "patients",
        revision: SchemaRevision = SchemaRevision.CURRENT,
    ):
        """Initialize the service.

        Args:
            client: Remote table client
            table: Name of the patients table
            revision: Column spelling used for writes
        """
        self.client = client
        self.table = table
        self.revision = revision

    def _column(self, field: str) -> str:
        return column_name(EntityKind.PATIENT, field, self.revision)

    async def list_all(self) -> list[Patient]:
        """All patients, newest first."""
        with log_failures(logger, "list patients"):
            rows = await self.client.select(self.table)
        return newest_first([patient_from_row(row) for row in rows])

    async def get_by_id(self, patient_id: str) -> Patient | None:
        """Get a patient by id, or None if there is no such patient."""
        with log_failures(logger, f"fetch patient {patient_id}"):
            rows = await self.client.select(self.table, {self._column("id"): patient_id})
        return patient_from_row(rows[0]) if rows else None

    async def require(self, patient_id: str) -> Patient:
        """Get a patient by id.

        Raises:
            NotFoundError: If there is no such patient
        """
        patient = await self.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError("Patient", patient_id)
        return patient

    async def get_by_status(self, status: PatientStatus) -> list[Patient]:
        """Patients with the given status, newest first."""
        with log_failures(logger, f"list {status} patients"):
            rows = await self.client.select(self.table, {self._column("status"): status})
        return newest_first([patient_from_row(row) for row in rows])

    async def get_active_patients(self) -> list[Patient]:
        """Patients that can currently receive visits."""
        return await self.get_by_status("active")

    async def create(self, data: PatientInput) -> Patient:
        """Create a patient with a fresh id and timestamps."""
        now = utc_now()
        patient = Patient(id=str(uuid.uuid4()), **data.model_dump(), created_at=now, updated_at=now)

        with log_failures(logger, "create patient"):
            row = await self.client.insert(self.table, [patient_to_row(patient, self.revision)])

        created = patient_from_row(row)
        logger.info(f"Created patient {created.id}")
        return created

    async def update(self, patient_id: str, patch: PatientUpdate) -> Patient:
        """Apply the fields set on ``patch`` and refresh ``updated_at``.

        Raises:
            NotFoundError: If there is no such patient
        """
        current = await self.require(patient_id)

        changes = patch.changes()
        changes["updated_at"] = next_timestamp(current.updated_at)

        with log_failures(logger, f"update patient {patient_id}"):
            row = await self.client.update(
                self.table, to_row(EntityKind.PATIENT, changes, self.revision), {self._column("id"): patient_id}
            )
        if row is None:
            raise NotFoundError("Patient", patient_id)

        logger.info(f"Updated patient {patient_id}: {sorted(patch.model_fields_set)}")
        return patient_from_row(row)

    async def delete(self, patient_id: str) -> None:
        """Delete a patient.

        Raises:
            NotFoundError: If there is no such patient, including on a repeated call
        """
        with log_failures(logger, f"delete patient {patient_id}"):
            deleted = await self.client.delete(self.table, {self._column("id"): patient_id})
        if not deleted:
            raise NotFoundError("Patient", patient_id)
        logger.info(f"Deleted patient {patient_id}")
