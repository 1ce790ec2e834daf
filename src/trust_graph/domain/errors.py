"""Domain error taxonomy.

Every failure the engine reports to a caller is one of four recoverable
kinds. The API layer maps ``kind`` to an HTTP status; library callers can
catch ``NetworkError`` and branch on the subclass.

Pure Python, zero framework imports.
"""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for structured, recoverable engine failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(NetworkError):
    """Referenced profile, edge or request does not exist or is not visible."""

    kind = "not_found"


class ConflictError(NetworkError):
    """Duplicate pending request, concurrent edge write, or busy edge lock."""

    kind = "conflict"


class InvalidStateError(NetworkError):
    """Action attempted against a record not in the required state."""

    kind = "invalid_state"


class ValidationError(NetworkError):
    """Missing or malformed input."""

    kind = "validation"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"
