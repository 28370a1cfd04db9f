"""Request dependencies shared by the API routers."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Response

from visitation.exceptions import PermissionDeniedError
from visitation.models.minister import Minister
from visitation.models.session import Session
from visitation.services.auth import MANAGE_MINISTERS
from visitation.services.registry import Services, get_services
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_HEADER = "X-Session-Id"

ServicesDep = Annotated[Services, Depends(get_services)]


def get_session(
    response: Response,
    services: ServicesDep,
    x_session_id: Annotated[str | None, Header()] = None,
) -> Session:
    """Resolve the caller's session, issuing a new id when none was sent."""
    session = services.sessions.get_or_create_session(x_session_id)
    if x_session_id is None:
        logger.info(f"Issued new session {session.session_id}")
    response.headers[SESSION_HEADER] = session.session_id
    return session


SessionDep = Annotated[Session, Depends(get_session)]


def require_login(session: SessionDep) -> Minister:
    """The logged-in minister, or 401."""
    if session.gate.minister is None:
        raise HTTPException(status_code=401, detail="Login required")
    return session.gate.minister


async def require_manage_ministers(session: SessionDep) -> Minister:
    """The logged-in minister if allowed to manage ministers, else 401/403."""
    if not session.gate.is_authenticated:
        raise HTTPException(status_code=401, detail="Login required")
    try:
        return await session.gate.require_permission(MANAGE_MINISTERS)
    except PermissionDeniedError as e:
        if not session.gate.is_authenticated:
            raise HTTPException(status_code=401, detail="Session is no longer valid, please log in again") from e
        raise HTTPException(status_code=403, detail="You do not have permission to manage ministers") from e


CurrentMinister = Annotated[Minister, Depends(require_login)]
MinisterManager = Annotated[Minister, Depends(require_manage_ministers)]
