"""Authentication and permission gate."""

from enum import Enum

from visitation.exceptions import NotFoundError, PermissionDeniedError, PersistenceError
from visitation.models.minister import Minister, MinisterRole
from visitation.services.ministers import MinisterService
from visitation.services.session_store import SessionStore
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

MANAGE_MINISTERS = "manage_ministers"

# Closed table of permission name to the roles that hold it
PERMISSIONS: dict[str, frozenset[MinisterRole]] = {
    MANAGE_MINISTERS: frozenset({"admin"}),
}


class LoginResult(Enum):
    """Outcome of a login attempt."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    SYSTEM_ERROR = "system_error"

    def __bool__(self) -> bool:
        return self is LoginResult.SUCCESS


class AuthGate:
    """Tracks who is logged in and answers permission questions.

    The gate is either anonymous or authenticated as one minister. A session
    record found in the store at construction authenticates the gate right
    away, but only as a hint: the record is checked against the backend the
    first time a privileged action asks for it.
    """

    def __init__(self, minister_service: MinisterService, store: SessionStore):
        """Initialize the gate and restore any stored session.

        Args:
            minister_service: Service used to check credentials
            store: Slot where the session record is kept
        """
        self.minister_service = minister_service
        self.store = store
        self.minister: Minister | None = None
        self.verified = False
        self._restore()

    @property
    def is_authenticated(self) -> bool:
        return self.minister is not None

    @property
    def is_admin(self) -> bool:
        return self.minister is not None and self.minister.is_admin

    def _restore(self) -> None:
        try:
            record = self.store.load()
            if record is None:
                return
            self.minister = Minister.from_session_record(record)
        except (OSError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Discarding unreadable session record: {e}")
            self.minister = None
            self.store.clear()
            return

        self.verified = False
        logger.info(f"Restored session for minister {self.minister.id} ({self.minister.username})")

    async def login(self, username: str, password: str) -> LoginResult:
        """Check credentials and authenticate the gate.

        The gate stays as it was when the credentials do not match or the
        backend fails. A failure to stamp ``last_login`` does not fail the login.
        """
        try:
            minister = await self.minister_service.authenticate(username, password)
        except PersistenceError as e:
            logger.error(f"Login for {username} failed with a system error: {e}")
            return LoginResult.SYSTEM_ERROR

        if minister is None:
            return LoginResult.INVALID_CREDENTIALS

        try:
            minister = await self.minister_service.record_login(minister.id)
        except (PersistenceError, NotFoundError) as e:
            logger.warning(f"Could not record last login for minister {minister.id}: {e}")

        self.minister = minister
        self.verified = True
        self.store.save(minister.as_session_record())
        logger.info(f"Minister {minister.id} ({minister.username}) logged in as {minister.role}")
        return LoginResult.SUCCESS

    def logout(self) -> None:
        """Drop the session. No backend call."""
        if self.minister is not None:
            logger.info(f"Minister {self.minister.id} logged out")
        self.minister = None
        self.verified = False
        self.store.clear()

    def has_permission(self, permission: str) -> bool:
        """Whether the current session holds ``permission``.

        Anonymous sessions hold nothing, and unknown permission names are
        never granted.
        """
        if self.minister is None:
            return False
        roles = PERMISSIONS.get(permission)
        return roles is not None and self.minister.role in roles

    async def revalidate(self) -> None:
        """Refresh a restored session from the backend.

        Raises:
            PermissionDeniedError: If the minister no longer exists, was
                deactivated or renamed. The session is dropped.
            PersistenceError: If the backend could not be reached
        """
        if self.minister is None or self.verified:
            return

        current = await self.minister_service.get_by_id(self.minister.id)
        if current is None or not current.is_active or current.username != self.minister.username:
            logger.warning(f"Stored session for minister {self.minister.id} is no longer valid")
            self.logout()
            raise PermissionDeniedError("authenticated")

        self.minister = current
        self.verified = True
        self.store.save(current.as_session_record())

    async def require_permission(self, permission: str) -> Minister:
        """Ensure the session holds ``permission`` before a privileged action.

        Returns:
            The current minister

        Raises:
            PermissionDeniedError: If anonymous, invalidated or lacking the permission
        """
        if self.minister is None:
            raise PermissionDeniedError(permission)
        await self.revalidate()
        if not self.has_permission(permission):
            raise PermissionDeniedError(permission)
        return self.minister
