"""Tests for API endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from visitation.api.dependencies import SESSION_HEADER
from visitation.clients.persistence import InMemoryPersistenceClient
from visitation.config import Settings
from visitation.main import app
from visitation.services.demo_data import seed_demo_data
from visitation.services.registry import build_services, get_services


@pytest.fixture
def services():
    """Services over a fresh in-memory store holding the demo records."""
    client = InMemoryPersistenceClient(
        auto_increment_tables={"ministers", "appointments"},
        unique_columns={"ministers": ("username",)},
    )
    services = build_services(Settings(), client=client)
    asyncio.run(seed_demo_data(services.patients, services.ministers))
    return services


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client: TestClient, username: str, password: str = "123456") -> dict[str, str]:
    """Log a new session in and return the headers that carry it."""
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {SESSION_HEADER: response.headers[SESSION_HEADER]}


def patient_id(client: TestClient, headers: dict[str, str], name: str) -> str:
    patients = client.get("/patients", headers=headers).json()
    return next(p["id"] for p in patients if p["name"] == name)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """Test that health check answers without a login."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self, client):
        """Test that health check returns expected JSON structure."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["backend"] == "memory"
        assert "timestamp" in data


class TestAuthEndpoints:
    """Tests for login, logout and the session description."""

    def test_new_session_id_is_issued(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is False
        assert data["minister"] is None
        assert response.headers[SESSION_HEADER] == data["session_id"]

    def test_login_as_user(self, client):
        """Test that a regular minister logs in without admin permissions."""
        response = client.post("/auth/login", json={"username": "pedro", "password": "123456"})

        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is True
        assert data["is_admin"] is False
        assert data["permissions"] == []
        assert data["minister"]["username"] == "pedro"
        assert "password" not in data["minister"]
        assert data["minister"]["last_login"] is not None

    def test_login_as_admin(self, client):
        headers = login(client, "marta")

        data = client.get("/auth/me", headers=headers).json()

        assert data["is_admin"] is True
        assert data["permissions"] == ["manage_ministers"]

    def test_invalid_credentials(self, client):
        response = client.post("/auth/login", json={"username": "pedro", "password": "wrong"})
        assert response.status_code == 401

    def test_login_requires_both_fields(self, client):
        response = client.post("/auth/login", json={"username": "pedro"})
        assert response.status_code == 422

    def test_backend_failure_is_503(self, client, services, failing_store):
        """Test that an unreachable backend is not reported as bad credentials."""
        services.ministers.client = failing_store

        response = client.post("/auth/login", json={"username": "pedro", "password": "123456"})

        assert response.status_code == 503

    def test_logout(self, client):
        headers = login(client, "pedro")

        response = client.post("/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json()["authenticated"] is False
        assert client.get("/patients", headers=headers).status_code == 401


class TestPatientEndpoints:
    """Tests for the patient routes."""

    def test_login_required(self, client):
        assert client.get("/patients").status_code == 401

    def test_list_and_filter(self, client):
        headers = login(client, "pedro")

        assert len(client.get("/patients", headers=headers).json()) == 4

        recovered = client.get("/patients", params={"status": "recovered"}, headers=headers).json()
        assert [p["name"] for p in recovered] == ["Ana Pereira"]

    def test_create_drops_blank_phones(self, client):
        headers = login(client, "pedro")

        response = client.post(
            "/patients",
            json={"name": "Lucia Costa", "district": "Centro", "phones": ["4444-5555", "", ""]},
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["phones"] == ["4444-5555"]
        assert data["status"] == "active"

    def test_create_without_phone_rejected(self, client):
        headers = login(client, "pedro")

        response = client.post("/patients", json={"name": "Lucia Costa", "phones": ["", ""]}, headers=headers)

        assert response.status_code == 422

    def test_update_status(self, client):
        headers = login(client, "pedro")
        maria = patient_id(client, headers, "Maria da Silva")

        response = client.patch(f"/patients/{maria}", json={"status": "recovered"}, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "recovered"
        assert data["district"] == "Centro"

    def test_get_and_delete(self, client):
        headers = login(client, "pedro")
        carlos = patient_id(client, headers, "Carlos Santos")

        assert client.get(f"/patients/{carlos}", headers=headers).status_code == 200
        assert client.delete(f"/patients/{carlos}", headers=headers).status_code == 204
        assert client.get(f"/patients/{carlos}", headers=headers).status_code == 404
        assert client.delete(f"/patients/{carlos}", headers=headers).status_code == 404

    def test_backend_failure_is_502(self, client, services, failing_store):
        headers = login(client, "pedro")
        services.patients.client = failing_store

        response = client.get("/patients", headers=headers)

        assert response.status_code == 502


class TestMinisterEndpoints:
    """Tests for the admin-only minister routes."""

    def test_anonymous_is_401(self, client):
        assert client.get("/ministers").status_code == 401

    def test_user_is_403(self, client):
        headers = login(client, "pedro")
        assert client.get("/ministers", headers=headers).status_code == 403

    def test_admin_lists_ministers(self, client):
        headers = login(client, "marta")

        response = client.get("/ministers", headers=headers)

        assert response.status_code == 200
        ministers = response.json()
        assert {m["username"] for m in ministers} == {"pedro", "marta"}
        assert all("password" not in m for m in ministers)

    def test_create_and_duplicate(self, client):
        headers = login(client, "marta")
        payload = {"name": "Rita Lima", "phone": "2222-3333", "username": "rita", "password": "secret"}

        created = client.post("/ministers", json=payload, headers=headers)
        duplicate = client.post("/ministers", json=payload, headers=headers)

        assert created.status_code == 201
        assert created.json()["role"] == "user"
        assert duplicate.status_code == 409

    def test_deactivated_minister_cannot_log_in(self, client):
        headers = login(client, "marta")
        pedro = next(m for m in client.get("/ministers", headers=headers).json() if m["username"] == "pedro")

        response = client.patch(f"/ministers/{pedro['id']}", json={"is_active": False}, headers=headers)

        assert response.status_code == 200
        assert client.post("/auth/login", json={"username": "pedro", "password": "123456"}).status_code == 401

    def test_delete_missing(self, client):
        headers = login(client, "marta")
        assert client.delete("/ministers/999", headers=headers).status_code == 404


class TestAppointmentEndpoints:
    """Tests for visit scheduling routes."""

    def schedule(self, client, headers, patient, date="2024-06-10T15:00:00.000Z"):
        return client.post(
            "/appointments",
            json={"patient_id": patient, "minister_id": 1, "minister_name": "Pedro Alves", "date": date},
            headers=headers,
        )

    def test_schedule_and_list_by_date(self, client):
        headers = login(client, "pedro")
        maria = patient_id(client, headers, "Maria da Silva")

        response = self.schedule(client, headers, maria)

        assert response.status_code == 201
        assert response.json()["date"] == "2024-06-10"

        on_day = client.get("/appointments", params={"date": "2024-06-10"}, headers=headers).json()
        assert [a["patient_id"] for a in on_day] == [maria]

    def test_double_booking_refused(self, client):
        """Test that a second visit for a patient on the same date is refused."""
        headers = login(client, "pedro")
        maria = patient_id(client, headers, "Maria da Silva")
        self.schedule(client, headers, maria)

        response = self.schedule(client, headers, maria, date="2024-06-10")

        assert response.status_code == 409
        assert self.schedule(client, headers, maria, date="2024-06-11").status_code == 201

    def test_availability(self, client):
        headers = login(client, "pedro")
        maria = patient_id(client, headers, "Maria da Silva")
        params = {"patient_id": maria, "date": "2024-06-10"}

        assert client.get("/appointments/availability", params=params, headers=headers).json()["booked"] is False
        self.schedule(client, headers, maria)
        assert client.get("/appointments/availability", params=params, headers=headers).json()["booked"] is True

    def test_unknown_patient(self, client):
        headers = login(client, "pedro")
        assert self.schedule(client, headers, "missing").status_code == 404

    def test_active_patients(self, client):
        headers = login(client, "pedro")

        patients = client.get("/appointments/active-patients", headers=headers).json()

        assert {p["name"] for p in patients} == {"Maria da Silva", "João Oliveira"}

    def test_cancel(self, client):
        headers = login(client, "pedro")
        maria = patient_id(client, headers, "Maria da Silva")
        appointment = self.schedule(client, headers, maria).json()

        assert client.delete(f"/appointments/{appointment['id']}", headers=headers).status_code == 204
        assert client.get(f"/appointments/{appointment['id']}", headers=headers).status_code == 404

    def test_minister_filter_needs_context(self, client):
        headers = login(client, "pedro")
        assert client.get("/appointments", params={"minister_id": 1}, headers=headers).status_code == 400


class TestReportEndpoints:
    """Tests for the report route."""

    def test_by_district(self, client):
        headers = login(client, "pedro")

        data = client.get("/reports/patients", params={"kind": "by_district"}, headers=headers).json()

        assert data["title"] == "Patients by district"
        assert data["total"] == 4
        assert data["districts"] == {"Centro": 1, "Jardim": 1, "Santa Rita": 1, "Vila Nova": 1}

    def test_unknown_kind(self, client):
        headers = login(client, "pedro")
        assert client.get("/reports/patients", params={"kind": "everyone"}, headers=headers).status_code == 422


class TestStartup:
    """Tests for the application lifespan."""

    def start(self, monkeypatch, services) -> dict:
        monkeypatch.setattr("visitation.main.get_services", lambda: services)
        app.dependency_overrides[get_services] = lambda: services
        try:
            with TestClient(app) as client:
                return client.get("/health").json()
        finally:
            app.dependency_overrides.clear()

    def test_demo_data_seeded_into_memory_backend(self, monkeypatch):
        services = build_services(Settings(seed_demo=True))

        health = self.start(monkeypatch, services)

        assert health["backend"] == "memory"
        assert len(asyncio.run(services.patients.list_all())) == 4

    def test_persistent_backend_is_never_seeded(self, monkeypatch, services):
        """Test that restarting against a store that keeps its rows does not re-insert the demo logins."""
        persistent = build_services(Settings(backend="postgrest", seed_demo=True), client=services.client)

        health = self.start(monkeypatch, persistent)

        assert health["status"] == "healthy"
        assert len(asyncio.run(persistent.ministers.list_all())) == 2
        assert len(asyncio.run(persistent.patients.list_all())) == 4


class TestReportConsistency:
    """Tests that a report is built from a single read."""

    def test_district_counts_match_listed_patients(self, client, services, monkeypatch):
        headers = login(client, "pedro")
        calls = []
        list_all = services.patients.list_all

        async def counting_list_all():
            calls.append(1)
            return await list_all()

        monkeypatch.setattr(services.patients, "list_all", counting_list_all)

        data = client.get("/reports/patients", params={"kind": "by_district"}, headers=headers).json()

        assert len(calls) == 1
        assert sum(data["districts"].values()) == data["total"]
