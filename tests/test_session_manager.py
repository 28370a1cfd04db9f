"""Tests for the API session manager."""

from datetime import UTC, datetime, timedelta

import pytest

from visitation.models.minister import MinisterInput
from visitation.services.auth import AuthGate
from visitation.services.session_manager import InMemorySessionManager
from visitation.services.session_store import InMemorySessionStore


@pytest.fixture
def manager(minister_service):
    return InMemorySessionManager(gate_factory=lambda: AuthGate(minister_service, InMemorySessionStore()))


class TestInMemorySessionManager:
    """Tests for session lookup and expiry."""

    def test_new_session_gets_id_and_anonymous_gate(self, manager):
        session = manager.get_or_create_session()

        assert session.session_id
        assert not session.gate.is_authenticated
        assert manager.get_session_count() == 1

    def test_existing_session_is_reused(self, manager):
        session = manager.get_or_create_session()
        assert manager.get_or_create_session(session.session_id) is session

    def test_unknown_id_is_adopted(self, manager):
        """Test that a client-supplied id that is not known yet starts a new session under it."""
        session = manager.get_or_create_session("client-chosen")
        assert session.session_id == "client-chosen"

    def test_sessions_have_separate_gates(self, manager):
        first = manager.get_or_create_session()
        second = manager.get_or_create_session()
        assert first.gate is not second.gate

    def test_expired_sessions_are_dropped(self, manager):
        session = manager.get_or_create_session()
        session.last_activity = datetime.now(UTC) - timedelta(hours=2)

        assert manager.get_session(session.session_id) is None
        assert manager.get_session_count() == 0

    def test_delete(self, manager):
        session = manager.get_or_create_session()
        assert manager.delete_session(session.session_id)
        assert not manager.delete_session(session.session_id)

    @pytest.mark.asyncio
    async def test_authenticated_count(self, manager, minister_service):
        await minister_service.create(
            MinisterInput(name="Pedro Alves", phone="9999-1111", username="pedro", password="123456")
        )
        logged_in = manager.get_or_create_session()
        manager.get_or_create_session()

        await logged_in.gate.login("pedro", "123456")

        assert manager.get_session_count() == 2
        assert manager.get_authenticated_session_count() == 1
        assert logged_in.as_dict()["authenticated"] is True

    def test_new_sessions_expire_idle_ones(self, manager):
        """Test that clients that never send a session id do not pile up sessions."""
        for _ in range(5):
            session = manager.get_or_create_session()
            session.last_activity = datetime.now(UTC) - timedelta(hours=2)

        manager.get_or_create_session()

        assert len(manager.sessions) == 1
