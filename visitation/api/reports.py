"""Report endpoints."""

from fastapi import APIRouter

from visitation.api.dependencies import CurrentMinister, ServicesDep
from visitation.models.api import ReportResponse
from visitation.services.reports import ReportKind, group_patients_by_district

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/patients", response_model=ReportResponse)
async def patient_report(
    services: ServicesDep, minister: CurrentMinister, kind: ReportKind = "all"
) -> ReportResponse:
    """Patients for a printable report."""
    report = await services.reports.patient_report(kind)

    districts = None
    if kind == "by_district":
        groups = group_patients_by_district(report.patients)
        districts = {district: len(patients) for district, patients in groups.items()}

    return ReportResponse(
        kind=report.kind,
        title=report.title,
        generated_at=report.generated_at,
        total=len(report.patients),
        patients=report.patients,
        districts=districts,
    )
