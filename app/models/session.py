"""
Model: AdminSession
Opaque server-side session token with an absolute expiry
"""

from db import db, now_utc


class AdminSession(db.Model):
    __tablename__ = "sessions"

    id = db.Column(db.String(64), primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    ip_address = db.Column(db.String(255))
    user_agent = db.Column(db.String(512))

