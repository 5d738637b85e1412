"""Exception hierarchy shared by every provider.

Both vendors map their failures onto the same set of classes so callers can
handle errors without knowing which backend raised them.
"""

from __future__ import annotations

from typing import Any


class TaskPilotError(Exception):
    """Base exception for provider and vendor errors."""

    code: str | None = None

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)

    def to_user_message(self) -> str:
        """Message suitable for terminal output."""
        return f"[{self.code}] {self.message}" if self.code else self.message


class AuthError(TaskPilotError):
    """Credential is invalid, expired or missing (401)."""

    code = "AUTH_ERROR"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class AuthConfigMissingError(AuthError):
    """Provider was initialized without credentials."""

    def __init__(self, message: str = "Auth config not set. Call set_auth() first."):
        super().__init__(message)


class NetworkError(TaskPilotError):
    """Transport failure before any response was received."""

    code = "NETWORK_ERROR"

    def __init__(self, is_timeout: bool = False, is_offline: bool = False):
        self.is_timeout = is_timeout
        self.is_offline = is_offline
        if is_timeout:
            message = "Request timeout"
        elif is_offline:
            message = "Network unavailable"
        else:
            message = "Network error"
        super().__init__(message)


class RateLimitError(TaskPilotError):
    """Vendor throttled the request (429, or GitHub 403 with no quota left)."""

    code = "RATE_LIMIT"

    def __init__(self, retry_after: int | None = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after:
            message += f". Retry after {retry_after}s"
        super().__init__(message, status_code=429)


class APIError(TaskPilotError):
    """Any other non-2xx vendor response.

    ``details`` holds the raw vendor body. It is kept out of ``str(error)``
    and only shown by ``describe(debug=True)``.
    """

    code = "API_ERROR"

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        self.details = details
        super().__init__(message, status_code=status_code)

    def describe(self, debug: bool = False) -> str:
        text = f"HTTP {self.status_code}: {self.message}" if self.status_code else self.message
        if debug and self.details is not None:
            text += f"\nDetails: {self.details!r}"
        return text


class NotFoundError(TaskPilotError):
    """Domain-level lookup failure (task, board or column)."""

    code = "NOT_FOUND"

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found", status_code=404)


class UnsupportedOperationError(TaskPilotError):
    """Unified operation with no vendor equivalent."""

    code = "UNSUPPORTED"


class ConfigurationError(TaskPilotError):
    """Invalid column configuration, board id or settings."""

    code = "CONFIG_ERROR"


class ProviderNotInitializedError(RuntimeError):
    """A provider method was called before ``initialize()``.

    Caller misuse, not a vendor failure: it sits outside the
    ``TaskPilotError`` tree and is never retried.
    """

    def __init__(self, message: str = "Provider not initialized. Call initialize() first."):
        super().__init__(message)
