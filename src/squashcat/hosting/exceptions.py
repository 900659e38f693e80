"""Hosting API exception classes."""

from squashcat.core.errors import SquashcatError


class HostingError(SquashcatError):
    """Base exception for hosting API errors."""

    def __init__(
        self, status_code: int, message: str, documentation_url: str | None = None
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.documentation_url = documentation_url
        super().__init__(f"[HTTP {status_code}] {message}")


class AuthenticationError(HostingError):
    """The token was rejected (401)."""


class AuthorizationError(HostingError):
    """The token lacks permission (403)."""


class NotFoundError(HostingError):
    """Repository, ref or file not found (404)."""


class ConflictError(HostingError):
    """The request conflicts with the repository state (409)."""


class ValidationError(HostingError):
    """The request was rejected as invalid (422 and other 4xx)."""


class ServerError(HostingError):
    """Server-side or connection failure (5xx)."""
