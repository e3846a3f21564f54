import logging
from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PawCareError(Exception):
    """Base class for errors that map onto an HTTP response"""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFound(PawCareError):
    """Resource is absent or owned by another user"""
    status_code = 404
    default_message = 'Not found'


class ValidationError(PawCareError):
    status_code = 400
    default_message = 'Invalid request'


class Conflict(PawCareError):
    status_code = 409
    default_message = 'Resource already exists'


class UpstreamProviderError(PawCareError):
    """An advisory provider call failed or no provider is configured"""
    status_code = 502
    default_message = 'AI provider request failed'


class StoreError(PawCareError):
    status_code = 500
    default_message = 'Database error'


class InvalidConfiguration(ValueError):
    """Raised by the rule layer for a nonsensical window or option"""


def register_error_handlers(app):
    from pawcare import db

    @app.errorhandler(PawCareError)
    def handle_pawcare_error(err):
        if err.status_code >= 500:
            logger.error(f"{type(err).__name__}: {err.message}")
        return jsonify({'error': err.message}), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(err):
        db.session.rollback()
        logger.error(f"Database error: {str(err)}")
        return jsonify({'error': StoreError.default_message}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({'error': err.name}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500
