"""Domain errors shared by stores, cache adapters and services.

Store errors propagate to the caller. Cache errors are raised by the
adapters and always recovered inside the services.
"""

from typing import Any


class TodoAppError(Exception):
    """Base class for application errors.

    Attributes:
        message: Human-readable description.
        error_code: Machine-readable code; defaults to the class name.
        details: Extra context (resource, identifier, ...).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StoreFailure(TodoAppError):
    """The relational store failed or timed out. Fatal to the request."""

    def __init__(self, message: str = "Store operation failed") -> None:
        super().__init__(message, "STORE_FAILURE")


class RecordNotFound(TodoAppError):
    """Target of a read or mutation does not exist (or is not the owner's)."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            f"{resource} with id {identifier} not found",
            "NOT_FOUND",
            {"resource": resource, "id": identifier},
        )


class DuplicateRecord(TodoAppError):
    """A unique constraint rejected the write."""

    def __init__(self, resource: str, field: str) -> None:
        super().__init__(
            f"{resource} with this {field} already exists",
            "DUPLICATE",
            {"resource": resource, "field": field},
        )


class CacheUnavailable(TodoAppError):
    """Any cache adapter failure: connection, timeout or protocol error."""

    def __init__(self, message: str = "Cache unavailable") -> None:
        super().__init__(message, "CACHE_UNAVAILABLE")
