"""
Model: Asset
Either an external link (url) or an inline file (filename + content)
"""

from db import db


class Asset(db.Model):
    __tablename__ = "assets"

    id = db.Column(db.Integer, primary_key=True)
    video_id = db.Column(db.Integer, db.ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    label = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(1000))
    filename = db.Column(db.String(255))
    content = db.Column(db.Text)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    @property
    def is_inline(self):
        return bool(self.content)

    @property
    def download_path(self):
        if self.is_inline:
            return f"/downloads/assets/{self.id}/{self.filename or ''}"
        return self.url

    def to_dict(self, include_content=False):
        data = {
            "id": self.id,
            "video_id": self.video_id,
            "label": self.label,
            "url": self.url,
            "filename": self.filename,
            "sort_order": self.sort_order,
            "download_url": self.download_path,
        }
        if include_content:
            data["content"] = self.content
        return data
