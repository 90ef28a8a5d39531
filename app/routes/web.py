"""
Web Routes - public gallery, JSON listing, inline downloads and health check
"""

from flask import Blueprint, Response, abort, current_app, jsonify, render_template, request
from api_responses import handle_api_errors
from services.content import content_disposition, detect_mime_type
import logging

# Retrieve main logger
logger = logging.getLogger("main")

web_bp = Blueprint("web", __name__)


@web_bp.route("/")
def index():
    """Public gallery of download packs"""
    query = (request.args.get("q") or "").strip()
    videos = current_app.content_service.list(query or None)
    return render_template("public.html", videos=videos, query=query)


@web_bp.route("/api/videos")
@handle_api_errors
def list_videos_api():
    service = current_app.content_service
    return jsonify({"videos": service.serialize_for_api(service.list())})


@web_bp.route("/downloads/assets/<int:asset_id>")
@web_bp.route("/downloads/assets/<int:asset_id>/<path:_name>")
def download_asset(asset_id, _name=None):
    """Serve an inline asset; the trailing path segment is cosmetic"""
    asset = current_app.content_service.get_asset(asset_id)
    if asset is None or not asset.is_inline:
        abort(404)

    filename = asset.filename or f"asset-{asset.id}.txt"
    logger.debug(f"Serving inline asset {asset.id} as {filename}")
    return Response(
        asset.content,
        status=200,
        content_type=detect_mime_type(filename),
        headers={"Content-Disposition": content_disposition(filename)},
    )


@web_bp.route("/healthz")
def healthz():
    return Response("ok", status=200, content_type="text/plain; charset=utf-8")
