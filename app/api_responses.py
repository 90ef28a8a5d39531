"""
Response Utilities - JSON envelopes for the API and redirect-with-message for admin forms
"""

from flask import jsonify, redirect
from functools import wraps
from urllib.parse import urlencode
import logging

from exceptions import ResourceHubException

logger = logging.getLogger(__name__)


# API Error Codes
class ErrorCode:
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    STORE_ERROR = "STORE_ERROR"


DEFAULT_MESSAGES = {
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.VALIDATION_ERROR: "Invalid request parameters",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
    ErrorCode.UNAUTHORIZED: "Authentication required",
    ErrorCode.CONFLICT: "Resource conflict",
    ErrorCode.STORE_ERROR: "Storage failure",
}


def error_response(error_code=ErrorCode.INTERNAL_ERROR, message=None, details=None, status_code=400, log_error=True):
    """
    Standard error response format for API endpoints
    """
    response = {"code": error_code, "success": False, "message": message or DEFAULT_MESSAGES.get(error_code)}

    if details:
        response["details"] = details

    if log_error and error_code in [ErrorCode.INTERNAL_ERROR, ErrorCode.STORE_ERROR]:
        logger.error(f"{error_code}: {message} | Details: {details}")

    return jsonify(response), status_code


def handle_api_errors(f):
    """
    Decorator to standardize error handling for API endpoints
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ResourceHubException as e:
            return error_response(e.code, message=e.message, status_code=e.status_code)
        except Exception as e:
            logger.error(f"Unhandled exception in {f.__name__}: {e}", exc_info=True)
            return error_response(ErrorCode.INTERNAL_ERROR, status_code=500)

    return wrapper


def redirect_with_message(location, flash=None, error=None):
    """302 to `location` carrying a human readable ?flash= or ?error= message"""
    params = {}
    if flash:
        params["flash"] = flash
    if error:
        params["error"] = error
    target = f"{location}?{urlencode(params)}" if params else location
    return redirect(target, code=302)


def message_for(exc):
    """Message safe to show to the admin for a failed action"""
    if isinstance(exc, ResourceHubException):
        return exc.message
    return DEFAULT_MESSAGES[ErrorCode.INTERNAL_ERROR]
