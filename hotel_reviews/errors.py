"""
API error taxonomy

Every error the core raises carries the HTTP status it maps to. The exception
handlers in main.py turn them into {"error": message, "status": code} bodies.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that are safe to show to the caller"""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"


class MissingFieldsError(ValidationError):
    default_message = "Missing required fields"


class InvalidRequestError(ValidationError):
    default_message = "Invalid request"


class InvalidToken(ApiError):
    status_code = 401
    default_message = "Invalid or expired token"


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class PersistenceError(ApiError):
    status_code = 500
    default_message = "Error saving record"


class ConfigurationError(ApiError):
    status_code = 500
    default_message = "Missing configuration"


class EmailDeliveryError(ApiError):
    status_code = 500
    default_message = "Failed to send email"


def persistence_error_from(exc: SQLAlchemyError) -> PersistenceError:
    """Translate a store-level failure into a PersistenceError"""
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        if "unique" in detail or "duplicate" in detail:
            return PersistenceError("Duplicate entry found", status_code=409)
        return PersistenceError("Validation failed", status_code=400)

    logger.error(f"❌ Database error: {exc}")
    return PersistenceError()
