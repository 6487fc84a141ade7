"""Error types and the JSON error handlers shared by every blueprint."""

from __future__ import annotations

from flask import Flask, current_app
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from clickcrate_actions.utils.actions import action_response


class ActionError(Exception):
    """A failure that should reach the wallet as ``{"message": ...}``."""

    def __init__(self, message: str, status: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def register_error_handlers(app: Flask) -> None:
    """Map handler exceptions onto the Actions error body."""

    @app.errorhandler(ValidationError)
    def _validation_failed(error: ValidationError):
        current_app.logger.info("Request validation failed: %s", error.errors())
        return action_response({"message": "Validation failed"}, 400)

    @app.errorhandler(ActionError)
    def _action_failed(error: ActionError):
        current_app.logger.warning("Action failed (%s): %s", error.status, error.message)
        return action_response({"message": error.message}, error.status)

    @app.errorhandler(Exception)
    def _unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return action_response({"message": error.description}, error.code or 500)

        current_app.logger.exception("Unhandled error: %s", error)
        message = str(error) or "An unexpected error occurred"
        return action_response({"message": message}, 500)
