"""
Repository for AdminUser database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db, now_utc
from models.admin_user import AdminUser


class AdminUserRepository:
    """Repository for AdminUser database operations"""

    @staticmethod
    def get_all():
        """Get all AdminUser records"""
        return AdminUser.query.order_by(AdminUser.username).all()

    @staticmethod
    def get_by_username(username):
        """Get AdminUser by username"""
        return db.session.get(AdminUser, username)

    @staticmethod
    def create(username, password_hash, salt, must_change_password=True):
        """Create new AdminUser record"""
        try:
            item = AdminUser(
                username=username,
                password_hash=password_hash,
                salt=salt,
                must_change_password=must_change_password,
            )
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update_password(username, password_hash, salt, must_change_password=False):
        """Store a new hash/salt pair; returns None when the user does not exist"""
        item = db.session.get(AdminUser, username)
        if not item:
            return None
        try:
            item.password_hash = password_hash
            item.salt = salt
            item.must_change_password = must_change_password
            item.updated_at = now_utc()
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def set_must_change_password(username, required=True):
        """Flip the rotation flag without touching the hash"""
        item = db.session.get(AdminUser, username)
        if not item:
            return None
        try:
            item.must_change_password = required
            item.updated_at = now_utc()
            db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def delete(username):
        """Delete AdminUser record"""
        item = db.session.get(AdminUser, username)
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
        """Count total AdminUser records"""
        return AdminUser.query.count()
