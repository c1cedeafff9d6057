"""
Storage Module

컬렉션 썸네일 저장소
"""

from storage.thumbnails import ThumbnailStore

__all__ = [
    "ThumbnailStore",
]
