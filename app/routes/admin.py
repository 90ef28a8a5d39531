"""
Admin Routes - dashboard and the form handlers that curate download packs
"""

from flask import Blueprint, current_app, redirect, render_template, request
from api_responses import redirect_with_message, message_for
from exceptions import ResourceHubException
from middleware.auth import GateState, access_required, current_gate_state
from services.content import tags_to_string
from utils import sanitize_sensitive_data
import logging

# Retrieve main logger
logger = logging.getLogger("main")

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _video_form():
    return {
        "title": request.form.get("title"),
        "description": request.form.get("description"),
        "video_url": request.form.get("video_url"),
        "thumbnail_url": request.form.get("thumbnail_url"),
        "tags": request.form.get("tags"),
    }


def _fail(action, e):
    logger.warning(f"{action} failed: {e}")
    return redirect_with_message("/admin", error=message_for(e))


@admin_bp.route("", methods=["GET"])
def dashboard():
    """Login page, password page or dashboard depending on the gate state"""
    state = current_gate_state()
    flash = request.args.get("flash")
    error = request.args.get("error")

    if state is GateState.UNAUTHENTICATED:
        credentials = current_app.credential_manager
        return render_template(
            "login.html",
            flash=flash,
            error=error,
            default_username=credentials.username,
            default_password=credentials.default_password,
            show_default_hint=credentials.is_using_default_credentials(),
        )

    if state is GateState.PENDING_ROTATION:
        return redirect("/admin/password", code=302)

    try:
        videos = current_app.content_service.list()
    except ResourceHubException as e:
        videos = []
        error = error or message_for(e)

    return render_template(
        "admin.html",
        admin_nav=True,
        videos=videos,
        flash=flash,
        error=error,
        tags_to_string=tags_to_string,
    )


@admin_bp.post("/videos")
@access_required("admin")
def create_video():
    logger.debug(f"Create video form: {sanitize_sensitive_data(request.form.to_dict())}")
    try:
        current_app.content_service.create(slug=request.form.get("slug"), **_video_form())
    except ResourceHubException as e:
        return _fail("Create video", e)
    return redirect_with_message("/admin", flash="Video pack created")


@admin_bp.post("/videos/<int:video_id>")
@access_required("admin")
def update_video(video_id):
    try:
        current_app.content_service.update(video_id, **_video_form())
    except ResourceHubException as e:
        return _fail(f"Update video {video_id}", e)
    return redirect_with_message("/admin", flash="Changes saved")


@admin_bp.post("/videos/<int:video_id>/delete")
@access_required("admin")
def delete_video(video_id):
    try:
        current_app.content_service.delete(video_id)
    except ResourceHubException as e:
        return _fail(f"Delete video {video_id}", e)
    return redirect_with_message("/admin", flash="Video deleted")


@admin_bp.post("/videos/<int:video_id>/assets")
@access_required("admin")
def add_asset(video_id):
    try:
        current_app.content_service.add_asset(
            video_id,
            request.form.get("label"),
            url=request.form.get("url"),
            filename=request.form.get("filename"),
            content=request.form.get("content"),
        )
    except ResourceHubException as e:
        return _fail(f"Add asset to video {video_id}", e)
    return redirect_with_message("/admin", flash="Asset added")


@admin_bp.post("/assets/<int:asset_id>/delete")
@access_required("admin")
def delete_asset(asset_id):
    try:
        current_app.content_service.remove_asset(asset_id)
    except ResourceHubException as e:
        return _fail(f"Remove asset {asset_id}", e)
    return redirect_with_message("/admin", flash="Asset removed")
