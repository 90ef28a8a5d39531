from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
from sqlalchemy.exc import SQLAlchemyError
import logging
import time

logger = logging.getLogger("main")

# Content Metrics
db_videos_total = Gauge("resource_hub_videos_total", "Total number of video packs")
db_assets_total = Gauge("resource_hub_assets_total", "Total number of assets")
db_sessions_active = Gauge("resource_hub_sessions_active", "Number of stored admin sessions")

# API Metrics
api_request_duration_seconds = Histogram(
    "resource_hub_request_duration_seconds", "Request duration", ["endpoint", "method"]
)

api_requests_total = Counter("resource_hub_requests_total", "Total requests", ["endpoint", "method", "status_code"])

# Auth Metrics
login_attempts_total = Counter("resource_hub_login_attempts_total", "Admin login attempts", ["result"])


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_db_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    logger.info("Prometheus metrics initialized at /api/metrics")


def update_db_metrics():
    """Refresh the content and session gauges from the store."""
    from repositories.asset_repository import AssetRepository
    from repositories.session_repository import SessionRepository
    from repositories.video_repository import VideoRepository

    try:
        db_videos_total.set(VideoRepository.count())
        db_assets_total.set(AssetRepository.count())
        db_sessions_active.set(SessionRepository.count())
    except SQLAlchemyError as e:
        logger.warning(f"Could not refresh metrics: {e}")
