"""
파이프라인 옵션 / 결과 / 진행률 타입
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from config import config
from core.logging_config import setup_logger
from errors.errors import ImportErrorInfo, Severity

logger = setup_logger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass
class ExportOptions:
    """내보내기 옵션"""
    collection_id: str
    include_user_data: bool = False  # 즐겨찾기 포함
    include_thumbnails: bool = True
    compression_level: int = field(default_factory=lambda: config.DEFAULT_COMPRESSION_LEVEL)

    def validate(self):
        if isinstance(self.compression_level, bool) or not isinstance(self.compression_level, int) \
                or not 0 <= self.compression_level <= 9:
            raise ValueError(f"compression level must be 0-9, got {self.compression_level!r}")
        if not self.collection_id:
            raise ValueError("collection_id is required")


@dataclass
class ImportOptions:
    """가져오기 옵션"""
    overwrite_existing: bool = False
    skip_version_check: bool = False
    # 새 컬렉션 저장 중 실패하면 일부 저장된 컬렉션 삭제
    rollback_on_failure: bool = False


class ImportStage(str, Enum):
    """가져오기 상태"""
    START = "start"
    ARCHIVE_OPENED = "archive_opened"
    MANIFEST_VALIDATED = "manifest_validated"
    CONFLICT_CHECKED = "conflict_checked"
    SKIPPED = "skipped"
    CONTENT_DECODED = "content_decoded"
    PERSISTED = "persisted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ImportOutcome:
    """
    가져오기 결과

    성공(imported_collection 설정), 건너뜀(skipped), 실패(success=False + errors) 중 하나.
    성공한 경우에도 경고 수준의 오류가 포함될 수 있습니다.
    """
    success: bool = False
    imported_collection: Optional[str] = None
    skipped: bool = False
    errors: List[ImportErrorInfo] = field(default_factory=list)
    stage: ImportStage = ImportStage.START

    @property
    def warnings(self) -> List[ImportErrorInfo]:
        return [e for e in self.errors if e.severity == Severity.WARNING]

    @property
    def failures(self) -> List[ImportErrorInfo]:
        return [e for e in self.errors if e.severity != Severity.WARNING]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "importedCollection": self.imported_collection,
            "skipped": self.skipped,
            "errors": [e.to_dict() for e in self.errors],
            "stage": self.stage.value,
        }


@dataclass
class ArchiveSummary:
    """가져오기 전 아카이브 표시 정보"""
    collection_id: str
    collection_name: str
    owner_name: str
    version: str
    language: str
    story_count: int
    export_date: datetime


@dataclass
class ImportableArchive:
    """디렉토리 내 가져오기 가능한 아카이브"""
    file_name: str
    summary: ArchiveSummary


@dataclass
class CollectionExportInfo:
    """내보내기 없이 계산한 컬렉션 정보"""
    collection_id: str
    display_name: str
    language: str
    version: str
    owner_username: str
    owner_name: str
    story_count: int
    frame_count: int
    estimated_size: int


class ProgressReporter:
    """
    진행률 콜백 래퍼

    0-100 정수로 자르고, 호출마다 이전 값보다 작아지지 않게 합니다.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.percent = 0

    def __call__(self, percent: float, status: str):
        value = max(self.percent, min(100, max(0, int(percent))))
        self.percent = value
        logger.debug(f"Progress {value}% - {status}")
        if self.callback:
            self.callback(value, status)
