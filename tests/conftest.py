"""Shared fixtures."""

import pytest

from visitation.clients.persistence import InMemoryPersistenceClient
from visitation.exceptions import TransportError
from visitation.services.appointments import AppointmentService
from visitation.services.ministers import MinisterService
from visitation.services.patients import PatientService


class FailingPersistenceClient:
    """Persistence client whose every call fails with the same error."""

    def __init__(self, error: Exception | None = None):
        self.error = error or TransportError("backend unreachable")

    async def select(self, table, filters=None):
        raise self.error

    async def insert(self, table, rows):
        raise self.error

    async def update(self, table, patch, filters):
        raise self.error

    async def delete(self, table, filters):
        raise self.error

    async def aclose(self):
        return None


@pytest.fixture
def store():
    """In-memory backend configured like the hosted tables."""
    return InMemoryPersistenceClient(
        auto_increment_tables={"ministers", "appointments"},
        unique_columns={"ministers": ("username",)},
    )


@pytest.fixture
def failing_store():
    """Backend that is always down."""
    return FailingPersistenceClient()


@pytest.fixture
def patient_service(store):
    return PatientService(store)


@pytest.fixture
def minister_service(store):
    return MinisterService(store)


@pytest.fixture
def appointment_service(store):
    return AppointmentService(store)
