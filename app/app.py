"""
Resource Hub - download packs for video tutorials
Application Factory and startup
"""
import warnings
import os
import sys
import signal
import threading
import logging

# Suppress Flask-Limiter in-memory storage warnings
warnings.filterwarnings("ignore", category=UserWarning, module="flask_limiter")

import flask.cli
flask.cli.show_server_banner = lambda *args: None

# Core Flask imports
from flask import Flask
from werkzeug.serving import make_server
import structlog

# Local imports
from constants import BUILD_VERSION, TEMPLATES_DIR
from settings import load_settings, format_branding_text
from db import db, init_db, close_db
from auth import auth_blueprint, login_manager, limiter
from exceptions import register_exception_handlers
from metrics import init_metrics
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs, get_or_create_secret_key, format_datetime

# Routes and services
from routes.admin import admin_bp
from routes.web import web_bp
from services.content import ContentService
from services.credentials import CredentialManager
from services.sessions import SessionManager, SqlSessionStore


def configure_logging():
    formatter = ColoredFormatter(
        '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=logging.INFO,
        handlers=[handler]
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Apply filter to hide date from http access logs
    logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())


configure_logging()
logger = structlog.get_logger('main')


def create_app(settings=None, config_overrides=None):
    """Application factory"""
    if settings is None:
        settings = load_settings()

    app = Flask(__name__, template_folder=TEMPLATES_DIR)
    app.config["SQLALCHEMY_DATABASE_URI"] = settings.database_uri
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = get_or_create_secret_key(settings.data_dir)
    if config_overrides:
        app.config.update(config_overrides)

    app.hub_settings = settings

    # Initialize components
    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(auth_blueprint)
    app.register_blueprint(admin_bp)
    app.register_blueprint(web_bp)

    # Initialize metrics
    init_metrics(app)

    # Services
    app.credential_manager = CredentialManager(settings)
    app.session_manager = SessionManager(SqlSessionStore(), settings.session_ttl)
    app.content_service = ContentService()

    # Initialize database and the admin credential
    init_db(app, settings)
    with app.app_context():
        app.credential_manager.reconcile_admin_identity()
        app.credential_manager.warn_if_default_credentials()

    @app.before_request
    def prune_expired_sessions():
        app.session_manager.sweep_expired()

    @app.context_processor
    def inject_branding():
        return {
            "branding": settings.branding,
            "site_name": settings.branding.get("site_name", ""),
            "format_branding": lambda text, **tokens: format_branding_text(text or "", settings, **tokens),
            "format_datetime": format_datetime,
            "build_version": BUILD_VERSION,
        }

    return app


def build_server(app, host=None, port=None):
    """Threaded werkzeug server whose request threads are joined on close"""
    settings = app.hub_settings
    server = make_server(host or settings.host, settings.port if port is None else port, app, threaded=True)
    server.daemon_threads = False
    server.block_on_close = True
    return server


def serve(app, server):
    try:
        server.serve_forever()
    finally:
        # server_close() joins in-flight requests; the store must outlive them
        server.server_close()
        close_db(app)
        logger.info('Server stopped')


def run(app=None):
    """Serve until SIGINT/SIGTERM, then drain requests and close the database"""
    if app is None:
        app = create_app()
    settings = app.hub_settings

    server = build_server(app)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        # shutdown() blocks until serve_forever returns, so it cannot run on the serving thread
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info(f'Resource hub running on http://{settings.host}:{settings.port}')
    serve(app, server)


if __name__ == '__main__':
    run()
