"""
Repository for Video database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from db import db
from models.video import Video


class VideoRepository:
    """Repository for Video database operations"""

    @staticmethod
    def get_all():
        """Get all videos newest first, assets eagerly loaded"""
        return (
            Video.query.options(selectinload(Video.assets))
            .order_by(Video.created_at.desc(), Video.id.desc())
            .all()
        )

    @staticmethod
    def search(term):
        """Case-insensitive substring match on title, description and tags"""
        needle = term.casefold()
        return [video for video in VideoRepository.get_all() if video.matches(needle)]

    @staticmethod
    def get_by_id(id):
        """Get Video by ID"""
        return db.session.get(Video, id)

    @staticmethod
    def get_by_slug(slug):
        """Get Video by slug"""
        return Video.query.filter_by(slug=slug).first()

    @staticmethod
    def create(**kwargs):
        """Create new Video record"""
        try:
            item = Video(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(id, **kwargs):
        """Update Video record"""
        item = db.session.get(Video, id)
        if not item:
            return None

        try:
            for key, value in kwargs.items():
                if hasattr(item, key):
                    setattr(item, key, value)
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def delete(id):
        """Delete Video record together with its assets"""
        item = db.session.get(Video, id)
        if not item:
            return False

        try:
            db.session.delete(item)
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def count():
        """Count total Video records"""
        return Video.query.count()
