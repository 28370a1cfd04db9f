"""Error types raised by the data-access layer."""


class VisitationError(Exception):
    """Base class for all errors raised by this package."""


class PersistenceError(VisitationError):
    """The remote store rejected or failed a request."""


class TransportError(PersistenceError):
    """The backend was unreachable or answered with a generic failure."""


class ConstraintError(PersistenceError):
    """A write violated a constraint on the remote table."""


class NotFoundError(VisitationError):
    """No record matched the requested id."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PermissionDeniedError(VisitationError):
    """The current session is not allowed to perform an action."""

    def __init__(self, permission: str):
        self.permission = permission
        super().__init__(f"Permission denied: {permission}")
