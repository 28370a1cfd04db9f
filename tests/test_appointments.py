"""Tests for the appointment service."""

from datetime import date

import pytest

from visitation.exceptions import NotFoundError
from visitation.models.appointment import AppointmentInput, AppointmentUpdate

VISIT_DAY = date(2024, 6, 10)


def visit(patient_id: str = "p-1", minister_id: int = 1, day: date = VISIT_DAY, **extra) -> AppointmentInput:
    return AppointmentInput(
        patient_id=patient_id,
        minister_id=minister_id,
        minister_name="Pedro Alves" if minister_id == 1 else "Marta Souza",
        date=day,
        **extra,
    )


class TestScheduling:
    """Tests for scheduling and listing visits."""

    @pytest.mark.asyncio
    async def test_schedule_then_list_by_date(self, appointment_service):
        """Test that a scheduled visit shows up on its date and nowhere else."""
        assert await appointment_service.get_appointments_by_date(VISIT_DAY) == []

        scheduled = await appointment_service.schedule_visit(visit(notes="Bring communion"))

        on_day = await appointment_service.get_appointments_by_date(VISIT_DAY)
        assert [a.id for a in on_day] == [scheduled.id]
        assert on_day[0].notes == "Bring communion"
        assert on_day[0].date == VISIT_DAY

        assert await appointment_service.get_appointments_by_date(date(2024, 6, 11)) == []

    @pytest.mark.asyncio
    async def test_date_column_holds_plain_date(self, store, appointment_service):
        await appointment_service.create(visit())
        assert store.tables["appointments"][0]["date"] == "2024-06-10"

    @pytest.mark.asyncio
    async def test_double_booking_is_not_blocked(self, appointment_service):
        """Test that scheduling the same patient twice on a date succeeds."""
        first = await appointment_service.create(visit())
        second = await appointment_service.create(visit(minister_id=2))

        assert first.id != second.id
        assert len(await appointment_service.get_appointments_by_date(VISIT_DAY)) == 2

    @pytest.mark.asyncio
    async def test_is_patient_booked(self, appointment_service):
        assert not await appointment_service.is_patient_booked("p-1", VISIT_DAY)

        await appointment_service.create(visit())

        assert await appointment_service.is_patient_booked("p-1", VISIT_DAY)
        assert not await appointment_service.is_patient_booked("p-2", VISIT_DAY)
        assert not await appointment_service.is_patient_booked("p-1", date(2024, 6, 11))

    @pytest.mark.asyncio
    async def test_by_patient(self, appointment_service):
        await appointment_service.create(visit())
        await appointment_service.create(visit(day=date(2024, 6, 12)))
        await appointment_service.create(visit(patient_id="p-2"))

        visits = await appointment_service.get_appointments_by_patient("p-1")

        assert len(visits) == 2
        assert {a.patient_id for a in visits} == {"p-1"}

    @pytest.mark.asyncio
    async def test_appointments_for_pair(self, appointment_service):
        """Test finding the visits of one patient with one minister."""
        with_pedro = await appointment_service.create(visit())
        await appointment_service.create(visit(minister_id=2))

        found = await appointment_service.get_appointments_for("p-1", 1)

        assert [a.id for a in found] == [with_pedro.id]


class TestChangingVisits:
    """Tests for updating and cancelling visits."""

    @pytest.mark.asyncio
    async def test_update_notes(self, appointment_service):
        scheduled = await appointment_service.create(visit())

        updated = await appointment_service.update(scheduled.id, AppointmentUpdate(notes="Family will be home"))

        assert updated.notes == "Family will be home"
        assert updated.date == scheduled.date

    @pytest.mark.asyncio
    async def test_update_missing(self, appointment_service):
        with pytest.raises(NotFoundError):
            await appointment_service.update(99, AppointmentUpdate(notes="x"))

    @pytest.mark.asyncio
    async def test_empty_update_returns_current(self, appointment_service):
        scheduled = await appointment_service.create(visit())
        assert await appointment_service.update(scheduled.id, AppointmentUpdate()) == scheduled

    @pytest.mark.asyncio
    async def test_cancel(self, appointment_service):
        """Test that a cancelled visit is gone and cannot be cancelled again."""
        scheduled = await appointment_service.create(visit())

        await appointment_service.delete(scheduled.id)

        assert await appointment_service.get_by_id(scheduled.id) is None
        assert not await appointment_service.is_patient_booked("p-1", VISIT_DAY)
        with pytest.raises(NotFoundError):
            await appointment_service.delete(scheduled.id)
