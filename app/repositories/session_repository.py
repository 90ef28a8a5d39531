"""
Repository for AdminSession database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.session import AdminSession


class SessionRepository:
    """Repository for AdminSession database operations"""

    @staticmethod
    def get_by_id(id):
        """Get AdminSession by ID"""
        return db.session.get(AdminSession, id)

    @staticmethod
    def create(**kwargs):
        """Create new AdminSession record"""
        try:
            item = AdminSession(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def delete(id):
        """Delete AdminSession record; deleting a missing id is not an error"""
        try:
            deleted = AdminSession.query.filter_by(id=id).delete(synchronize_session=False)
            db.session.commit()
            return deleted > 0
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def delete_expired(now):
        """Delete every session whose expiry has passed; returns the number removed"""
        try:
            deleted = AdminSession.query.filter(AdminSession.expires_at < now).delete(synchronize_session=False)
            db.session.commit()
            return deleted
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def count():
        """Count total AdminSession records"""
        return AdminSession.query.count()
