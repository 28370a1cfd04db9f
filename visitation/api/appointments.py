"""Visit scheduling endpoints."""

import datetime as dt

from fastapi import APIRouter, HTTPException

from visitation.api.dependencies import CurrentMinister, ServicesDep
from visitation.models.api import AvailabilityResponse
from visitation.models.appointment import Appointment, AppointmentInput
from visitation.models.patient import Patient
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get("", response_model=list[Appointment])
async def list_appointments(
    services: ServicesDep,
    minister: CurrentMinister,
    date: dt.date | None = None,
    patient_id: str | None = None,
    minister_id: int | None = None,
) -> list[Appointment]:
    """List appointments on a date, of a patient, or of a patient with a minister."""
    if date is not None:
        appointments = await services.appointments.get_appointments_by_date(date)
        if patient_id is not None:
            appointments = [apt for apt in appointments if apt.patient_id == patient_id]
        if minister_id is not None:
            appointments = [apt for apt in appointments if apt.minister_id == minister_id]
        return appointments
    if patient_id is not None and minister_id is not None:
        return await services.appointments.get_appointments_for(patient_id, minister_id)
    if patient_id is not None:
        return await services.appointments.get_appointments_by_patient(patient_id)
    if minister_id is not None:
        raise HTTPException(status_code=400, detail="minister_id filter needs a date or a patient_id")
    return await services.appointments.list_all()


@router.get("/active-patients", response_model=list[Patient])
async def list_schedulable_patients(services: ServicesDep, minister: CurrentMinister) -> list[Patient]:
    """Patients that can be scheduled for a visit."""
    return await services.patients.get_active_patients()


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    patient_id: str, date: dt.date, services: ServicesDep, minister: CurrentMinister
) -> AvailabilityResponse:
    """Whether the patient already has a visit on the date."""
    booked = await services.appointments.is_patient_booked(patient_id, date)
    return AvailabilityResponse(patient_id=patient_id, date=date.isoformat(), booked=booked)


@router.post("", response_model=Appointment, status_code=201)
async def schedule_visit(data: AppointmentInput, services: ServicesDep, minister: CurrentMinister) -> Appointment:
    """Schedule a visit.

    Refuses a second visit for the same patient on the same date. The check
    runs before the insert and is not atomic with it.
    """
    await services.patients.require(data.patient_id)

    if await services.appointments.is_patient_booked(data.patient_id, data.date):
        logger.info(f"Patient {data.patient_id} already has a visit on {data.date}")
        raise HTTPException(status_code=409, detail="Patient already has a visit scheduled on this date")

    return await services.appointments.schedule_visit(data)


@router.get("/{appointment_id}", response_model=Appointment)
async def get_appointment(appointment_id: int, services: ServicesDep, minister: CurrentMinister) -> Appointment:
    """Get one appointment."""
    return await services.appointments.require(appointment_id)


@router.delete("/{appointment_id}", status_code=204)
async def cancel_appointment(appointment_id: int, services: ServicesDep, minister: CurrentMinister) -> None:
    """Cancel a visit."""
    await services.appointments.delete(appointment_id)
