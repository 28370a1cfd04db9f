"""Minister account service."""

from visitation.clients.persistence import PersistenceClient
from visitation.exceptions import NotFoundError
from visitation.mapping.columns import EntityKind, SchemaRevision, column_name
from visitation.mapping.mapper import minister_from_row, to_row
from visitation.models.minister import Minister, MinisterInput, MinisterUpdate
from visitation.services.base import log_failures, newest_first
from visitation.utils.logging import get_logger
from visitation.utils.timestamps import next_timestamp, utc_now

logger = get_logger(__name__)


def credentials_match(stored_password: str, supplied_password: str) -> bool:
    """Compare a stored credential against the one supplied at login.

    Passwords are stored in plaintext. This is the only place that knows it.
    """
    return bool(stored_password) and stored_password == supplied_password


class MinisterService:
    """Manage minister accounts and check their credentials."""

    def __init__(
        self,
        client: PersistenceClient,
        table: str = "ministers",
        revision: SchemaRevision = SchemaRevision.CURRENT,
    ):
        self.client = client
        self.table = table
        self.revision = revision

    def _column(self, field: str) -> str:
        return column_name(EntityKind.MINISTER, field, self.revision)

    async def list_all(self) -> list[Minister]:
        """All ministers, newest first."""
        with log_failures(logger, "list ministers"):
            rows = await self.client.select(self.table)
        return newest_first([minister_from_row(row) for row in rows])

    async def get_by_id(self, minister_id: int) -> Minister | None:
        """Get a minister by id, or None."""
        with log_failures(logger, f"fetch minister {minister_id}"):
            rows = await self.client.select(self.table, {self._column("id"): minister_id})
        return minister_from_row(rows[0]) if rows else None

    async def require(self, minister_id: int) -> Minister:
        """Get a minister by id.

        Raises:
            NotFoundError: If there is no such minister
        """
        minister = await self.get_by_id(minister_id)
        if minister is None:
            raise NotFoundError("Minister", minister_id)
        return minister

    async def create(self, data: MinisterInput) -> Minister:
        """Create a minister. The backend assigns the id.

        Raises:
            ConstraintError: If the username is already taken
        """
        now = utc_now()
        values = {**data.model_dump(), "created_at": now, "updated_at": now}

        with log_failures(logger, f"create minister {data.username}"):
            row = await self.client.insert(self.table, [to_row(EntityKind.MINISTER, values, self.revision)])

        created = minister_from_row(row)
        logger.info(f"Created minister {created.id} ({created.username}, {created.role})")
        return created

    async def update(self, minister_id: int, patch: MinisterUpdate) -> Minister:
        """Apply the fields set on ``patch`` and refresh ``updated_at``.

        Raises:
            NotFoundError: If there is no such minister
        """
        current = await self.require(minister_id)

        changes = patch.changes()
        changes["updated_at"] = next_timestamp(current.updated_at)

        with log_failures(logger, f"update minister {minister_id}"):
            row = await self.client.update(
                self.table, to_row(EntityKind.MINISTER, changes, self.revision), {self._column("id"): minister_id}
            )
        if row is None:
            raise NotFoundError("Minister", minister_id)

        logger.info(f"Updated minister {minister_id}: {sorted(patch.model_fields_set)}")
        return minister_from_row(row)

    async def delete(self, minister_id: int) -> None:
        """Delete a minister.

        Raises:
            NotFoundError: If there is no such minister
        """
        with log_failures(logger, f"delete minister {minister_id}"):
            deleted = await self.client.delete(self.table, {self._column("id"): minister_id})
        if not deleted:
            raise NotFoundError("Minister", minister_id)
        logger.info(f"Deleted minister {minister_id}")

    async def authenticate(self, username: str, password: str) -> Minister | None:
        """Find the active minister with these credentials.

        Returns:
            The minister, or None when the credentials do not match

        Raises:
            PersistenceError: If the backend could not be queried
        """
        with log_failures(logger, f"look up minister {username}"):
            rows = await self.client.select(self.table, {self._column("username"): username})

        for row in rows:
            minister = minister_from_row(row)
            if not credentials_match(minister.password, password):
                continue
            if not minister.is_active:
                logger.warning(f"Login refused for inactive minister {username}")
                return None
            return minister

        logger.info(f"Invalid credentials for {username}")
        return None

    async def record_login(self, minister_id: int) -> Minister:
        """Stamp ``last_login`` with the current time.

        Raises:
            NotFoundError: If there is no such minister
        """
        values = {"last_login": utc_now()}
        with log_failures(logger, f"record login for minister {minister_id}"):
            row = await self.client.update(
                self.table, to_row(EntityKind.MINISTER, values, self.revision), {self._column("id"): minister_id}
            )
        if row is None:
            raise NotFoundError("Minister", minister_id)
        return minister_from_row(row)
