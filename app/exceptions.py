"""
Resource Hub - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify, request
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class ResourceHubException(Exception):
    """Base exception for Resource Hub"""
    status_code = 400

    def __init__(self, message: str, code: str = "RESOURCE_HUB_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'error': True,
            'code': self.code,
            'message': self.message
        }


class ValidationError(ResourceHubException):
    """Missing or invalid user input"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")
        logger.warning(f"Validation error: {message}")


class ConflictError(ResourceHubException):
    """Uniqueness violation"""
    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")
        logger.warning(f"Conflict: {message}")


class NotFoundError(ResourceHubException):
    """Operation on a missing record"""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, code="NOT_FOUND")


class AuthError(ResourceHubException):
    """Missing, invalid or expired session, or wrong credentials"""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_ERROR")
        logger.warning(f"Authentication error: {message}")


class StoreError(ResourceHubException):
    """Persistence failure; the message shown to callers stays generic"""
    status_code = 500

    def __init__(self, message: str = "Storage failure", detail: str = None):
        super().__init__(message, code="STORE_ERROR")
        logger.error(f"Database error: {detail or message}")


class ConfigurationError(ResourceHubException):
    """Invalid startup configuration"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


def _wants_json():
    return request.path.startswith('/api/') or request.accept_mimetypes.best == 'application/json'


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        if not _wants_json():
            return e
        return jsonify({
            'error': True,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description
        }), e.code

    @app.errorhandler(ResourceHubException)
    def handle_resource_hub_exception(e):
        """Handle Resource Hub custom exceptions"""
        if _wants_json():
            return jsonify(e.to_dict()), e.status_code
        return e.message, e.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        if _wants_json():
            return jsonify({
                'error': True,
                'code': 'INTERNAL_ERROR',
                'message': 'An unexpected error occurred'
            }), 500
        return "Internal Server Error", 500
