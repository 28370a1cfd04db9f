"""Printable patient reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from visitation.models.patient import Patient
from visitation.services.patients import PatientService
from visitation.utils.timestamps import utc_now

ReportKind = Literal["all", "active", "recovered", "deceased", "by_district"]

REPORT_TITLES: dict[str, str] = {
    "all": "All patients",
    "active": "Active patients",
    "recovered": "Recovered patients",
    "deceased": "Deceased patients",
    "by_district": "Patients by district",
}


@dataclass
class PatientReport:
    """A titled list of patients."""

    kind: ReportKind
    title: str
    patients: list[Patient]
    generated_at: datetime = field(default_factory=utc_now)


def _district_key(patient: Patient) -> str:
    return patient.district.casefold()


def group_patients_by_district(patients: list[Patient]) -> dict[str, list[Patient]]:
    """Group patients under their district, districts in alphabetical order."""
    groups: dict[str, list[Patient]] = {}
    for patient in sorted(patients, key=_district_key):
        groups.setdefault(patient.district, []).append(patient)
    return groups


class ReportService:
    """Build patient reports from the patient service."""

    def __init__(self, patient_service: PatientService):
        self.patient_service = patient_service

    async def patient_report(self, kind: ReportKind = "all") -> PatientReport:
        """Patients for a report kind.

        Status reports filter on status. ``by_district`` lists everyone sorted
        by district, keeping the newest-first order inside each district.
        """
        if kind in ("active", "recovered", "deceased"):
            patients = await self.patient_service.get_by_status(kind)
        elif kind == "by_district":
            patients = sorted(await self.patient_service.list_all(), key=_district_key)
        elif kind == "all":
            patients = await self.patient_service.list_all()
        else:
            raise ValueError(f"Unknown report kind: {kind}")

        return PatientReport(kind=kind, title=REPORT_TITLES[kind], patients=patients)

    async def group_by_district(self) -> dict[str, list[Patient]]:
        """Patients grouped under their district, districts in alphabetical order."""
        return group_patients_by_district(await self.patient_service.list_all())
