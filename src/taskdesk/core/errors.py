# src/taskdesk/core/errors.py

"""
Error taxonomy shared by the session and task layers.

Local errors (never sent to the server):
- ValidationError: bad user input caught before any network call
- EditSessionError: update attempted without a matching edit in progress
- StorageUnavailableError: the credential medium cannot be written

Gateway errors (raised by the authenticated request gateway):
- UnauthorizedError (401/403) and its NoCredentialError special case
- ServerError (any other non-2xx)
- TransportError (network failure or malformed response)
"""

from __future__ import annotations


class TaskdeskError(Exception):
    """Base class for every error raised by taskdesk."""


class ValidationError(TaskdeskError):
    pass


class EditSessionError(TaskdeskError):
    pass


class StorageUnavailableError(TaskdeskError):
    pass


class AuthError(TaskdeskError):
    """Auth API call failed (login, register, password reset)."""


class GatewayError(TaskdeskError):
    pass


class UnauthorizedError(GatewayError):
    def __init__(self, status: int | None = None) -> None:
        self.status = status
        super().__init__("Session expired or invalid. Please login again.")


class NoCredentialError(UnauthorizedError):
    """No token present: the request was never sent."""

    def __init__(self) -> None:
        super().__init__(None)
        self.args = ("Authentication token not found. Please login again.",)


class ServerError(GatewayError):
    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(message)


class TransportError(GatewayError):
    pass


def friendly_error_message(err: Exception) -> str:
    if isinstance(err, TransportError):
        return "Cannot reach the task service. Check your connection and try again."
    if isinstance(err, ServerError):
        return err.message
    msg = str(err).strip()
    return msg or "An error occurred during the API request."
