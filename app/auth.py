from flask import Blueprint, current_app, g, redirect, render_template, request
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from api_responses import redirect_with_message, message_for
from constants import SESSION_COOKIE, LOGIN_FAILURE_DELAY, LOGIN_RATE_LIMIT
from exceptions import AuthError, ResourceHubException
from metrics import login_attempts_total
from middleware.auth import access_required, current_session_id
from utils import sanitize_sensitive_data
import logging
import time

# Retrieve main logger
logger = logging.getLogger("main")

auth_blueprint = Blueprint("auth", __name__)

login_manager = LoginManager()
# Sessions live server-side behind the sid cookie; Flask's signed session is never used
login_manager.session_protection = None

limiter = Limiter(key_func=get_remote_address, default_limits=[], storage_uri="memory://")


@login_manager.request_loader
def load_admin_from_session_cookie(req):
    """Resolve the sid cookie to the admin identity, or None."""
    session_id = req.cookies.get(SESSION_COOKIE)
    if not session_id:
        return None
    try:
        if current_app.session_manager.lookup(session_id) is None:
            return None
        admin = current_app.credential_manager.get_admin()
    except SQLAlchemyError as e:
        logger.error(f"Failed to lookup session: {e}")
        return None
    g.session_id = session_id
    return admin


def is_secure_request():
    forwarded_proto = request.headers.get("X-Forwarded-Proto")
    if forwarded_proto:
        proto = forwarded_proto.split(",")[0].strip().lower()
        if proto in ("https", "http"):
            return proto == "https"
    return request.is_secure


def client_ip():
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.remote_addr


def set_session_cookie(response, session_id):
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=current_app.hub_settings.session_max_age,
        path="/",
        secure=is_secure_request(),
        httponly=True,
        samesite="Lax",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(
        SESSION_COOKIE,
        path="/",
        secure=is_secure_request(),
        httponly=True,
        samesite="Lax",
    )
    return response


def failed_login_delay():
    # Same delay for unknown user and wrong password
    time.sleep(LOGIN_FAILURE_DELAY)


@auth_blueprint.post("/admin/login")
@limiter.limit(LOGIN_RATE_LIMIT)
def login():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""
    logger.debug(f"Login attempt: {sanitize_sensitive_data(request.form.to_dict())}")

    if not username or not password:
        return redirect_with_message("/admin", error="Missing credentials")

    try:
        admin = current_app.credential_manager.authenticate(username, password)
    except SQLAlchemyError as e:
        logger.error(f"Login lookup failed: {e}")
        return redirect_with_message("/admin", error="Login is temporarily unavailable")

    if admin is None:
        login_attempts_total.labels(result="failure").inc()
        logger.warning(f"Incorrect login for user {username}")
        failed_login_delay()
        return redirect_with_message("/admin", error="Invalid credentials")

    try:
        session_id, _ = current_app.session_manager.create(
            ip_address=client_ip(),
            user_agent=request.headers.get("User-Agent"),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to create session: {e}")
        return redirect_with_message("/admin", error="Login is temporarily unavailable")

    login_attempts_total.labels(result="success").inc()
    logger.info(f"Successful login for user {username}")
    destination = "/admin/password" if admin.must_change_password else "/admin"
    return set_session_cookie(redirect(destination, code=302), session_id)


@auth_blueprint.post("/admin/logout")
@access_required("session")
def logout():
    try:
        current_app.session_manager.revoke(current_session_id())
    except SQLAlchemyError as e:
        logger.error(f"Failed to revoke session: {e}")
    return clear_session_cookie(redirect("/admin", code=302))


@auth_blueprint.get("/admin/password")
@access_required("session")
def password_form():
    credentials = current_app.credential_manager
    require_change = credentials.must_change_password()
    return render_template(
        "password.html",
        admin_nav=True,
        require_change=require_change,
        show_default_hint=require_change and credentials.is_using_default_credentials(),
        default_password=credentials.default_password,
        min_password_length=credentials.min_password_length,
        error=request.args.get("error"),
        flash=request.args.get("flash"),
    )


@auth_blueprint.post("/admin/password")
@access_required("session")
def change_password():
    try:
        current_app.credential_manager.change_password(
            request.form.get("current_password") or "",
            request.form.get("new_password") or "",
            request.form.get("confirm_password") or "",
        )
    except AuthError as e:
        failed_login_delay()
        return redirect_with_message("/admin/password", error=e.message)
    except ResourceHubException as e:
        return redirect_with_message("/admin/password", error=message_for(e))
    except SQLAlchemyError as e:
        logger.error(f"Password change failed: {e}")
        return redirect_with_message("/admin/password", error="Password change failed")

    return redirect_with_message("/admin", flash="Password updated")
