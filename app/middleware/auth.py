"""
Access gate - decides what an admin request may do based on its session
and the credential's rotation flag
"""
from enum import Enum
from functools import wraps
from flask import g, request
from flask_login import current_user
from api_responses import redirect_with_message
from constants import SESSION_COOKIE
import logging

logger = logging.getLogger('main')


class GateState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    PENDING_ROTATION = "pending_rotation"
    ACTIVE = "active"


# access level -> states allowed through
ACCESS_LEVELS = {
    "session": (GateState.PENDING_ROTATION, GateState.ACTIVE),
    "admin": (GateState.ACTIVE,),
}


def resolve_gate_state(user):
    """Gate state for a loaded user (or anonymous user / None)"""
    if user is None or not getattr(user, "is_authenticated", False):
        return GateState.UNAUTHENTICATED
    if getattr(user, "must_change_password", False):
        return GateState.PENDING_ROTATION
    return GateState.ACTIVE


def current_gate_state():
    return resolve_gate_state(current_user)


def current_session_id():
    return getattr(g, "session_id", None) or request.cookies.get(SESSION_COOKIE)


def access_required(access="admin"):
    """
    "session": any authenticated admin, even with a password rotation pending
    "admin": authenticated admin whose password is not pending rotation
    """
    allowed = ACCESS_LEVELS[access]

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            state = current_gate_state()
            if state is GateState.UNAUTHENTICATED:
                return redirect_with_message("/admin", error="Please login")
            if state not in allowed:
                logger.info(f"Password rotation pending, redirecting {request.method} {request.path}")
                return redirect_with_message("/admin/password")
            return f(*args, **kwargs)
        return decorated_function
    return decorator
