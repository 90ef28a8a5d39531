from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
import os
import sqlite3
import logging
from constants import SEED_VIDEOS
from utils import now_utc

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enforce foreign keys (asset cascade) and configure SQLite for concurrent readers"""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def init_db(app, settings):
    """Create the data directory and tables, then seed demo packs on an empty store."""
    os.makedirs(settings.data_dir, exist_ok=True)
    with app.app_context():
        # Register models on the metadata before create_all
        import models  # noqa: F401

        db.create_all()
        if settings.seed_demo_content:
            seed_if_empty()


def seed_if_empty():
    from models import Video, Asset

    if Video.query.count() > 0:
        return

    logger.info(f"Seeding {len(SEED_VIDEOS)} demo download packs")
    for entry in SEED_VIDEOS:
        video = Video(
            title=entry["title"],
            slug=entry["slug"],
            description=entry["description"],
            video_url=entry["video_url"],
            thumbnail_url=entry["thumbnail_url"],
            tags=list(entry["tags"]),
        )
        for index, asset in enumerate(entry["assets"]):
            video.assets.append(Asset(label=asset["label"], url=asset["url"], sort_order=index))
        db.session.add(video)
    db.session.commit()


def close_db(app):
    """Release pooled connections; called on shutdown."""
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    logger.info("Database connections closed")
