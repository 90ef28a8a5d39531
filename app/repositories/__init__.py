"""
Repositories package

Each repository encapsulates database operations for a model:
- video_repository.py
- asset_repository.py
- session_repository.py
- admin_user_repository.py

Usage:
    from repositories.video_repository import VideoRepository
    videos = VideoRepository.get_all()
"""
