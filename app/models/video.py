"""
Model: Video
A download pack: tutorial metadata plus its attached assets
"""

from db import db, now_utc
from utils import ensure_utc


class Video(db.Model):
    __tablename__ = "videos"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(180), unique=True, nullable=False)
    description = db.Column(db.Text)
    video_url = db.Column(db.String(500))
    thumbnail_url = db.Column(db.String(500))
    tags = db.Column(db.JSON, nullable=False, default=list)  # ["docker", "security"]
    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    assets = db.relationship(
        "Asset",
        backref="video",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Asset.sort_order, Asset.id]",
    )

    __table_args__ = (db.Index("idx_videos_created_at", "created_at"),)

    def matches(self, needle):
        """`needle` must already be casefolded; matched literally, no wildcards"""
        haystack = [self.title or "", self.description or ""] + list(self.tags or [])
        return any(needle in text.casefold() for text in haystack)

    def to_dict(self, include_content=False):
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "video_url": self.video_url,
            "thumbnail_url": self.thumbnail_url,
            "tags": list(self.tags or []),
            "created_at": ensure_utc(self.created_at).isoformat() if self.created_at else None,
            "updated_at": ensure_utc(self.updated_at).isoformat() if self.updated_at else None,
            "assets": [asset.to_dict(include_content=include_content) for asset in self.assets],
        }
