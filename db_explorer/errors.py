"""
Error taxonomy for DB Explorer.

Every error raised by the catalog, the coercion engine, the query builder or
the service derives from ExplorerError. The HTTP layer renders any of them as
an `{"error": <message>}` envelope with the error's status code. Server-side
failures share one generic public message; their details only go to the log.
"""

from __future__ import annotations

INTERNAL_SERVER_ERROR = "internal server error"


class ExplorerError(Exception):
    """Base class for request-scoped failures."""

    status_code: int = 500
    public_message: str | None = INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def envelope_message(self) -> str:
        """Message exposed to the HTTP caller."""
        return self.public_message or self.message


class ConnectivityError(ExplorerError):
    """The store could not be reached or a read statement failed."""


class SchemaError(ExplorerError):
    """Column introspection for a table failed."""


class DMLError(ExplorerError):
    """An INSERT, UPDATE or DELETE failed to execute."""


class ValidationError(ExplorerError):
    """The request carries a value that is incompatible with the schema."""

    status_code = 400
    public_message = None


class NotFoundError(ExplorerError):
    """Unknown table, or a by-id read that matched no row."""

    status_code = 404
    public_message = None


def invalid_field(name: str) -> ValidationError:
    return ValidationError(f"field {name} have invalid type")


__all__ = [
    "INTERNAL_SERVER_ERROR",
    "ExplorerError",
    "ConnectivityError",
    "SchemaError",
    "DMLError",
    "ValidationError",
    "NotFoundError",
    "invalid_field",
]
