"""PostgREST table client for the hosted database."""

from dataclasses import dataclass
from typing import Any

import httpx

from visitation.clients.persistence import Filters, Row
from visitation.exceptions import ConstraintError, TransportError
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

# Postgres SQLSTATE class 23 is "integrity constraint violation"
CONSTRAINT_SQLSTATE_PREFIX = "23"


@dataclass
class PostgrestConfig:
    """Configuration for the PostgREST client."""

    base_url: str  # REST root, e.g. https://<project>.supabase.co/rest/v1
    api_key: str
    timeout: float = 10.0


def _encode_filter(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class PostgrestPersistenceClient:
    """Table access over PostgREST's HTTP interface.

    Equality filters are sent as ``column=eq.value`` query parameters and
    writes ask for the stored representation back. Requests are never retried.
    """

    def __init__(self, config: PostgrestConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: Connection settings
            transport: Optional httpx transport, used by tests
        """
        if not config.base_url:
            raise ValueError("PostgREST base URL is required")

        self.config = config
        self.http = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/") + "/",
            headers={
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=config.timeout,
            transport=transport,
        )

    async def select(self, table: str, filters: Filters | None = None) -> list[Row]:
        """Fetch matching rows."""
        params = {"select": "*", **self._filter_params(filters)}
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, rows: list[Row]) -> Row:
        """Insert rows and return the first stored row."""
        if not rows:
            raise ValueError("insert requires at least one row")
        stored = await self._request("POST", table, json=rows, representation=True)
        if not stored:
            raise TransportError(f"Insert into {table} returned no rows")
        return stored[0]

    async def update(self, table: str, patch: Row, filters: Filters) -> Row | None:
        """Patch matching rows, returning the first or None."""
        if not filters:
            raise ValueError("update requires at least one filter")
        stored = await self._request(
            "PATCH", table, params=self._filter_params(filters), json=patch, representation=True
        )
        return stored[0] if stored else None

    async def delete(self, table: str, filters: Filters) -> bool:
        """Delete matching rows."""
        if not filters:
            raise ValueError("delete requires at least one filter")
        stored = await self._request("DELETE", table, params=self._filter_params(filters), representation=True)
        return bool(stored)

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self.http.aclose()

    def _filter_params(self, filters: Filters | None) -> dict[str, str]:
        return {column: _encode_filter(value) for column, value in (filters or {}).items()}

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        representation: bool = False,
    ) -> list[Row]:
        headers = {"Prefer": "return=representation"} if representation else None
        try:
            response = await self.http.request(method, table, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{method} {table} failed: {e}")
            raise TransportError(f"Backend unreachable: {e}") from e

        if response.is_error:
            self._raise_for_response(method, table, response)

        if not response.content:
            return []
        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"{method} {table} returned a body that is not JSON: {e}")
            raise TransportError(f"{table}: unreadable response from backend") from e
        return body if isinstance(body, list) else [body]

    def _raise_for_response(self, method: str, table: str, response: httpx.Response) -> None:
        try:
            detail = response.json()
        except ValueError:
            detail = {"message": response.text}
        code = str(detail.get("code", "")) if isinstance(detail, dict) else ""
        message = detail.get("message", response.text) if isinstance(detail, dict) else response.text

        logger.error(f"{method} {table} returned {response.status_code}: {code} {message}")
        if response.status_code == 409 or code.startswith(CONSTRAINT_SQLSTATE_PREFIX):
            raise ConstraintError(f"{table}: {message}")
        raise TransportError(f"{table}: HTTP {response.status_code} {message}")
