"""Error types surfaced by the project API and webhook endpoints.

Every error carries the HTTP status it maps to. Route handlers let these
propagate; a single exception handler renders them as ``{"error": message}``.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class VibeshipError(Exception):
    """Base error with an HTTP status code and a client-facing message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationFailure(VibeshipError):
    """Missing, malformed or wrong bearer key, or a bad webhook signature."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationFailure(VibeshipError):
    """Malformed JSON, disallowed field, invalid enum value or tag shape."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(VibeshipError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationFailure(VibeshipError):
    """Server-side configuration is missing.

    The detailed message is only logged; clients get ``public_message``.
    """

    def __init__(self, message: str, public_message: str = "Server misconfigured"):
        super().__init__(message)
        self.public_message = public_message


class UpstreamFailure(VibeshipError):
    """A storage write or an external service call failed."""


class GitHubError(UpstreamFailure):
    status_code = status.HTTP_502_BAD_GATEWAY


class GitHubAuthError(AuthenticationFailure):
    """The stored GitHub token was rejected."""


async def vibeship_error_handler(request: Request, exc: VibeshipError) -> JSONResponse:
    """Render a VibeshipError as ``{"error": ...}``."""
    message = exc.public_message if isinstance(exc, ConfigurationFailure) else exc.message
    return JSONResponse(status_code=exc.status_code, content={"error": message})
