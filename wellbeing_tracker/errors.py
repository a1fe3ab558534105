"""Centralised error handling and custom exceptions.

This module defines custom exception classes and provides
Flask error handlers that serialise them into JSON responses.
The activity store raises these exceptions without knowing
anything about HTTP; the handlers registered by the
application factory translate them into status codes.
"""
from __future__ import annotations

from flask import jsonify


class ValidationError(Exception):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_response(self, status_code: int = 400):
        response = {
            "error": {
                "code": self.code,
                "message": self.message,
                "fields": self.fields,
            }
        }
        return jsonify(response), status_code


class InvalidLogError(ValidationError):
    """Raised when a wellbeing log is missing required variant fields.

    The store raises this from ``add_log`` and ``update_log`` and leaves
    its collection unchanged. The HTTP layer also raises it when a
    request body cannot be loaded into a log.
    """

    code = "INVALID_LOG"


class NotFoundError(Exception):
    """Raised when a requested resource cannot be found."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 404):
        response = {
            "error": {
                "code": "NOT_FOUND",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


class StorageVersionError(Exception):
    """Raised when persisted data was written by a newer schema version."""

    def __init__(self, version, supported: int) -> None:
        super().__init__(
            f"Stored log collection has version {version!r}; "
            f"this build reads up to version {supported}."
        )
        self.version = version
        self.supported = supported


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return err.to_response(400)

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(err: NotFoundError):
        return err.to_response(404)
