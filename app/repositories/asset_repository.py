"""
Repository for Asset database operations
"""

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.asset import Asset


class AssetRepository:
    """Repository for Asset database operations"""

    @staticmethod
    def get_by_id(id):
        """Get Asset by ID"""
        return db.session.get(Asset, id)

    @staticmethod
    def get_by_video(video_id):
        """Assets of one video in display order"""
        return Asset.query.filter_by(video_id=video_id).order_by(Asset.sort_order.asc(), Asset.id.asc()).all()

    @staticmethod
    def next_sort_order(video_id):
        """Position right after the last asset of a video"""
        current = db.session.query(func.max(Asset.sort_order)).filter(Asset.video_id == video_id).scalar()
        return 0 if current is None else current + 1

    @staticmethod
    def create(**kwargs):
        """Create new Asset record"""
        try:
            item = Asset(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def delete(id):
        """Delete Asset record"""
        item = db.session.get(Asset, id)
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
        """Count total Asset records"""
        return Asset.query.count()
