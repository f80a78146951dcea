from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for errors raised by handlers; rendered as the error envelope."""
    status = 500
    error = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class BadRequest(ApiError):
    status = 400
    error = "BAD_REQUEST"
    message = "Bad request"


class ValidationFailed(ApiError):
    status = 422
    error = "VALIDATION_ERROR"
    message = "Invalid input"


class Unauthenticated(ApiError):
    status = 401
    error = "UNAUTHENTICATED"
    message = "unauthenticated"


class InvalidToken(ApiError):
    status = 401
    error = "INVALID_TOKEN"
    message = "invalid token"


class TokenReused(InvalidToken):
    error = "TOKEN_REUSED"
    message = "refresh token already used"


class NotFound(ApiError):
    status = 404
    error = "NOT_FOUND"
    message = "Resource not found"


class Conflict(ApiError):
    status = 409
    error = "CONFLICT"
    message = "Conflict"


class Internal(ApiError):
    pass


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"status": status, "error": error, "message": message, "success": False}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status >= 500:
            logger.exception("Request failed: %s", err.message, exc_info=err)
        elif current_app and current_app.debug:
            logger.debug("%s (%s): %s", err.error, err.status, err.message)
        return error_response(err.error, err.message, err.status, details=err.details)

    # 404 Not Found (unknown routes)
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # 413 body larger than MAX_CONTENT_LENGTH
    @app.errorhandler(413)
    def too_large(e):
        return error_response("PAYLOAD_TOO_LARGE", "Request body too large", 413)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Integrity errors raced past the explicit checks (unique constraints, FKs)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        from models import storage

        storage.rollback()
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        if "foreign key" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.name.upper().replace(" ", "_"), err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
