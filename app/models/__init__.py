"""
Models package

- video.py: download packs shown on the public gallery
- asset.py: downloadable resources attached to a video
- session.py: server-side admin sessions
- admin_user.py: the single administrative credential

For convenience, import from the package:
    from models import Video, Asset, AdminSession, AdminUser
"""

from .video import Video
from .asset import Asset
from .session import AdminSession
from .admin_user import AdminUser

__all__ = [
    "Video",
    "Asset",
    "AdminSession",
    "AdminUser",
]
