"""
Database Module

데이터베이스 관리, 저장소 CRUD, 배치 저장
"""

from db.crud import (
    DatabaseManager,
    LibraryStore,
)
from db.batch_writer import BatchWriter

__all__ = [
    "DatabaseManager",
    "LibraryStore",
    "BatchWriter",
]
