"""Exception taxonomy for the order service.

Services raise these exceptions; the API layer maps each one to an HTTP status
code through FastAPI exception handlers. Cart operations never raise.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class OrderServiceError(Exception):
    """Base class for all service errors.

    Attributes:
        message: Human readable error message returned to clients
        details: Optional structured detail (e.g. field level errors)
        status_code: HTTP status code the API layer responds with
    """

    status_code: int = 500

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(OrderServiceError):
    """Malformed or semantically invalid request data."""

    status_code = 400


class NotFoundError(OrderServiceError):
    """A referenced restaurant, menu item or order does not exist."""

    status_code = 404


class ConflictError(OrderServiceError):
    """The request conflicts with the current state of a resource."""

    status_code = 409


class InvalidStatusTransition(ConflictError):
    """An order status update would move the order backwards."""


class PersistenceError(OrderServiceError):
    """A storage failure; the enclosing transaction was rolled back."""

    status_code = 500


class UploadError(OrderServiceError):
    """An image upload was rejected or could not be stored."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures inside the block as PersistenceError.

    Service errors raised inside the block pass through unchanged. Storage
    details are logged but never returned to clients.

    Args:
        action: Short description used in the log and client message
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception(f"Storage failure while trying to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e
