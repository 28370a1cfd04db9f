"""Health and authentication endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException

from visitation import __version__
from visitation.api.dependencies import ServicesDep, SessionDep
from visitation.models.api import HealthResponse, LoginRequest, MinisterResponse, SessionResponse
from visitation.models.session import Session
from visitation.services.auth import PERMISSIONS, LoginResult
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _session_response(session: Session) -> SessionResponse:
    gate = session.gate
    return SessionResponse(
        session_id=session.session_id,
        authenticated=gate.is_authenticated,
        is_admin=gate.is_admin,
        minister=MinisterResponse.from_minister(gate.minister) if gate.minister else None,
        permissions=sorted(name for name in PERMISSIONS if gate.has_permission(name)),
    )


@router.post("/auth/login", response_model=SessionResponse, tags=["Auth"])
async def login(request: LoginRequest, session: SessionDep) -> SessionResponse:
    """Log the session in with a username and password."""
    result = await session.gate.login(request.username, request.password)

    if result is LoginResult.INVALID_CREDENTIALS:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if result is LoginResult.SYSTEM_ERROR:
        raise HTTPException(status_code=503, detail="Could not log in right now, please try again later")

    logger.info(f"Session {session.session_id} logged in as {request.username}")
    return _session_response(session)


@router.post("/auth/logout", response_model=SessionResponse, tags=["Auth"])
async def logout(session: SessionDep) -> SessionResponse:
    """Log the session out."""
    session.gate.logout()
    return _session_response(session)


@router.get("/auth/me", response_model=SessionResponse, tags=["Auth"])
async def me(session: SessionDep) -> SessionResponse:
    """Describe the current session."""
    return _session_response(session)


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(services: ServicesDep) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
        backend=services.settings.backend,
        sessions=services.sessions.get_session_count(),
    )
