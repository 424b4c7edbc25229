"""Exceptions raised by the agency store."""


class AgencyError(Exception):
    """Base class for agency store errors."""


class RemoteOperationError(AgencyError):
    """A request to the agency API failed (network error or non-success status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OfflineOperationError(AgencyError):
    """An online-only operation was attempted while offline."""


class EntityNotFoundError(AgencyError, KeyError):
    """No entity with the given identifier exists in the collection."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} entity not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return str(self.args[0])


class StorageError(AgencyError):
    """A local snapshot could not be read or written."""
