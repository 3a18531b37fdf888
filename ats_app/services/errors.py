"""
Exceptions raised by the transfer services.

Routes translate these into JSON responses using ``status_code``.
``DependencyError`` is the exception: it marks a failed downstream call (mail
transport) that callers log and swallow.
"""

from http import HTTPStatus


class ServiceError(Exception):
    """Base exception for service failures."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Raised when input is missing or malformed."""

    status_code = HTTPStatus.BAD_REQUEST


class NotFoundError(ServiceError):
    """Raised when a transfer request or record cannot be located."""

    status_code = HTTPStatus.NOT_FOUND


class ConflictError(ServiceError):
    """Raised when the current state forbids the transition (e.g. already reviewed)."""

    status_code = HTTPStatus.BAD_REQUEST


class TransactionError(ServiceError):
    """Raised when the database work of a transition fails and was rolled back."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class DependencyError(ServiceError):
    """Raised when a downstream collaborator (mail transport) fails."""

    status_code = HTTPStatus.BAD_GATEWAY
