"""
Error taxonomy for campuslife operations.

Every failure surfaced to a caller is a CampusLifeError carrying a
human-readable message and a short machine code. Lifecycle operations raise
before touching the committed document, so a raised error always means
"nothing changed".
"""

from __future__ import annotations


class CampusLifeError(Exception):
    """Base class for all campuslife errors."""

    code = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(CampusLifeError):
    """An entity id (or e-mail) could not be resolved."""

    code = "not_found"


class ConflictError(CampusLifeError, ValueError):
    """The operation would duplicate state or re-run a finished transition."""

    code = "conflict"


class AuthorizationError(CampusLifeError):
    """The actor lacks permission for the operation."""

    code = "forbidden"


class AuthenticationError(AuthorizationError):
    """Credentials were presented but did not match."""

    code = "invalid_pin"


class ValidationError(CampusLifeError, ValueError):
    """Malformed input: missing field, bad PIN format, unknown role."""

    code = "invalid"


class PersistenceError(CampusLifeError):
    """The underlying store could not be read or written."""

    code = "persistence"
