"""Per-client login sessions for the HTTP API."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from cuid2 import cuid_wrapper

from visitation.models.session import Session
from visitation.services.auth import AuthGate
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

GateFactory = Callable[[], AuthGate]


class InMemorySessionManager:
    """Maps ``X-Session-Id`` values to sessions, each with its own auth gate.

    Sessions idle for longer than the timeout are forgotten, which logs the
    client out. Nothing survives a restart.
    """

    def __init__(self, gate_factory: GateFactory, session_timeout_minutes: int = 60):
        """Initialize the manager.

        Args:
            gate_factory: Builds an anonymous gate for each new session
            session_timeout_minutes: Idle minutes before a session is dropped
        """
        self.gate_factory = gate_factory
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.sessions: dict[str, Session] = {}

    def get_or_create_session(self, session_id: str | None = None) -> Session:
        """Session for ``session_id``, started fresh if unknown or expired.

        An unknown id sent by the client is kept as the new session's id.
        """
        self._expire()
        session = self.get_session(session_id) if session_id else None
        if session is not None:
            return session

        session = Session(session_id=session_id or cuid(), gate=self.gate_factory())
        self.sessions[session.session_id] = session
        logger.debug(f"Started session {session.session_id}")
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Live session for ``session_id``, marking it active, or None."""
        self._expire()
        session = self.sessions.get(session_id)
        if session is not None:
            session.update_activity()
        return session

    def delete_session(self, session_id: str) -> bool:
        """Forget a session. Returns False if there was none."""
        return self.sessions.pop(session_id, None) is not None

    def get_session_count(self) -> int:
        self._expire()
        return len(self.sessions)

    def get_authenticated_session_count(self) -> int:
        self._expire()
        return sum(1 for session in self.sessions.values() if session.gate.is_authenticated)

    def _expire(self) -> None:
        cutoff = datetime.now(UTC) - self.session_timeout
        expired = [session_id for session_id, session in self.sessions.items() if session.last_activity < cutoff]
        for session_id in expired:
            del self.sessions[session_id]
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
