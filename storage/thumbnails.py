"""
컬렉션 썸네일 저장소

썸네일은 해석하지 않는 바이너리 blob으로 취급합니다.
"""

import hashlib
import re
from pathlib import Path
from typing import Optional

from config import config
from core.logging_config import setup_logger

logger = setup_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ThumbnailStore:
    """파일 시스템 기반 썸네일 저장소"""

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Args:
            base_dir: 썸네일 디렉토리 (기본값: config.THUMBNAIL_DIR)
        """
        self.base_dir = Path(base_dir or config.THUMBNAIL_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, collection_id: str) -> Path:
        """owner/name -> owner__name_<hash>.jpg"""
        safe = _UNSAFE_CHARS.sub("_", collection_id.replace("/", "__"))
        digest = hashlib.sha256(collection_id.encode("utf-8")).hexdigest()[:8]
        return self.base_dir / f"{safe}_{digest}.jpg"

    def get_collection_thumbnail(self, collection_id: str) -> Optional[bytes]:
        """썸네일 바이트 조회 (없으면 None)"""
        path = self._path_for(collection_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def save_collection_thumbnail(self, collection_id: str, data: bytes) -> Path:
        """썸네일 저장"""
        path = self._path_for(collection_id)
        path.write_bytes(data)
        logger.debug(f"Saved thumbnail for {collection_id}: {path} ({len(data)} bytes)")
        return path

    def delete_collection_thumbnail(self, collection_id: str) -> bool:
        path = self._path_for(collection_id)
        if path.exists():
            path.unlink()
            return True
        return False
