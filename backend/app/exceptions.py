"""
TouristMap Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the storage layer
       can report.
How:   Each exception class carries a message and optional context dict.
       The storage engine translates driver errors into these types; global
       handlers registered in main.py turn them into JSON error responses.
Who:   Raised by the storage engine and PinService; caught by global handlers.

Exception Hierarchy:
    TouristMapError (base)
    ├── ValidationError          → 400 Bad Request (invariant violated)
    ├── NotFoundError            → 404 Not Found
    ├── ConstraintError          → 409 Conflict (referential integrity)
    ├── StorageUnavailableError  → 503 Service Unavailable
    └── SerializationError       → 500 Internal Server Error

None of these are retried by the storage layer; they propagate unchanged to
the caller of the access contract.
"""

from typing import Any, Dict, Optional


class TouristMapError(Exception):
    """
    Base exception for all TouristMap application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partially returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TouristMapError):
    """
    Raised when a pin or rating violates a data invariant.

    When:    Title longer than 32 characters, coordinates outside the
             longitude/latitude ranges, rating outside 1..5, or a CHECK /
             NOT NULL constraint rejected by the database itself.
    HTTP:    400 Bad Request

    Malformed request bodies never reach this exception; FastAPI rejects them
    with 422 before the handler runs.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(TouristMapError):
    """
    Raised when a lookup by id finds no matching row.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConstraintError(TouristMapError):
    """
    Raised when a referential constraint fails.

    When:    A rating references a pin that does not exist (foreign key).
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "A referential constraint was violated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageUnavailableError(TouristMapError):
    """
    Raised when the storage location cannot be opened, created or reached.

    When:    Database file or directory inaccessible, schema creation failed,
             connection pool exhausted past its timeout, database locked
             past the busy timeout, or any other driver-level I/O failure.
    HTTP:    503 Service Unavailable

    The message returned to clients is generic; driver details are logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "The storage backend is currently unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SerializationError(TouristMapError):
    """
    Raised when a persisted row cannot be turned into a domain object.

    Should not occur under normal operation; indicates a row written outside
    the application that breaks the expected column types.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Stored data could not be read",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
