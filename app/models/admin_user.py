"""
Model: AdminUser
The administrative credential; exactly one row is authoritative at a time
"""

from db import db, now_utc
from flask_login import UserMixin


class AdminUser(UserMixin, db.Model):
    __tablename__ = "admin_users"

    username = db.Column(db.String(100), primary_key=True)
    password_hash = db.Column(db.String(255), nullable=False)
    salt = db.Column(db.String(64), nullable=False)
    must_change_password = db.Column(db.Boolean, nullable=False, default=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    def get_id(self):
        return self.username
