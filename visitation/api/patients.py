"""Patient endpoints."""

from fastapi import APIRouter

from visitation.api.dependencies import CurrentMinister, ServicesDep
from visitation.exceptions import NotFoundError
from visitation.models.patient import Patient, PatientInput, PatientStatus, PatientUpdate

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=list[Patient])
async def list_patients(
    services: ServicesDep, minister: CurrentMinister, status: PatientStatus | None = None
) -> list[Patient]:
    """List patients, optionally only those with one status."""
    if status is not None:
        return await services.patients.get_by_status(status)
    return await services.patients.list_all()


@router.get("/{patient_id}", response_model=Patient)
async def get_patient(patient_id: str, services: ServicesDep, minister: CurrentMinister) -> Patient:
    """Get one patient."""
    patient = await services.patients.get_by_id(patient_id)
    if patient is None:
        raise NotFoundError("Patient", patient_id)
    return patient


@router.post("", response_model=Patient, status_code=201)
async def create_patient(data: PatientInput, services: ServicesDep, minister: CurrentMinister) -> Patient:
    """Register a new patient."""
    return await services.patients.create(data)


@router.patch("/{patient_id}", response_model=Patient)
async def update_patient(
    patient_id: str, patch: PatientUpdate, services: ServicesDep, minister: CurrentMinister
) -> Patient:
    """Change the fields sent in the body, such as status or observations."""
    return await services.patients.update(patient_id, patch)


@router.delete("/{patient_id}", status_code=204)
async def delete_patient(patient_id: str, services: ServicesDep, minister: CurrentMinister) -> None:
    """Delete a patient."""
    await services.patients.delete(patient_id)
