"""
Error Classification and Handling

가져오기/내보내기 오류 분류 및 처리 시스템
- 오류 종류(kind)와 숫자 코드(code)는 다국어 메시지용으로 고정
- 파이프라인 내부에서는 예외로, ImportOutcome에서는 ImportErrorInfo로 표현
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from core.logging_config import setup_logger

logger = setup_logger(__name__)


class ImportErrorKind(str, Enum):
    """오류 종류"""
    VERSION_CONFLICT = "VERSION_CONFLICT"
    DUPLICATE_COLLECTION = "DUPLICATE_COLLECTION"
    CORRUPTED_DATA = "CORRUPTED_DATA"
    MISSING_DEPENDENCIES = "MISSING_DEPENDENCIES"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ImportErrorCode(IntEnum):
    """숫자 오류 코드"""
    # 버전 관련 (1000-1099)
    VERSION_CONFLICT_NEWER = 1000
    VERSION_CONFLICT_OLDER = 1001
    VERSION_INCOMPATIBLE = 1002

    # 중복 (1100-1199)
    DUPLICATE_COLLECTION = 1100

    # 데이터 검증 (1200-1299)
    INVALID_MANIFEST = 1200
    MISSING_MANIFEST = 1201
    CORRUPTED_DATA = 1202
    MISSING_DEPENDENCIES = 1203

    # 파일 시스템 (1300-1399)
    FILE_READ_ERROR = 1300
    FILE_WRITE_ERROR = 1301

    # 사용자 데이터 (1400-1499)
    USER_DATA_RESTORE_ERROR = 1401

    # 조회 실패 (1500-1599)
    NOT_FOUND = 1500

    # 알 수 없음 (1900-1999)
    UNKNOWN_ERROR = 1900


class Recommendation(str, Enum):
    """충돌 해결 권장 사항"""
    SKIP = "SKIP"
    OVERWRITE = "OVERWRITE"
    MERGE = "MERGE"


class Severity(str, Enum):
    """오류 심각도"""
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ImportErrorDetails:
    """오류 상세 정보"""
    existing_version: Optional[str] = None
    import_version: Optional[str] = None
    collection_id: Optional[str] = None
    collection_name: Optional[str] = None
    owner_name: Optional[str] = None
    language: Optional[str] = None
    recommendation: Optional[Recommendation] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "existingVersion": self.existing_version,
            "importVersion": self.import_version,
            "collectionId": self.collection_id,
            "collectionName": self.collection_name,
            "ownerName": self.owner_name,
            "language": self.language,
            "recommendation": self.recommendation.value if self.recommendation else None,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class ImportErrorInfo:
    """ImportOutcome에 기록되는 구조화된 오류"""
    kind: ImportErrorKind
    code: ImportErrorCode
    message: str
    can_retry: bool = False
    severity: Severity = Severity.ERROR
    details: Optional[ImportErrorDetails] = None

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.kind.value,
            "code": int(self.code),
            "message": self.message,
            "canRetry": self.can_retry,
            "severity": self.severity.value,
        }
        if self.details is not None:
            data["details"] = self.details.to_dict()
        return data


# ===== 예외 계층 =====

class LibraryArchiveError(Exception):
    """가져오기/내보내기 예외 베이스"""
    kind: ImportErrorKind = ImportErrorKind.UNKNOWN_ERROR
    code: ImportErrorCode = ImportErrorCode.UNKNOWN_ERROR
    can_retry: bool = False


class CorruptedArchiveError(LibraryArchiveError):
    """ZIP 컨테이너가 손상되었거나 잘림"""
    kind = ImportErrorKind.CORRUPTED_DATA
    code = ImportErrorCode.CORRUPTED_DATA


class ManifestMissingError(LibraryArchiveError):
    """manifest.json 엔트리 없음"""
    kind = ImportErrorKind.CORRUPTED_DATA
    code = ImportErrorCode.MISSING_MANIFEST


class ManifestInvalidError(LibraryArchiveError):
    """manifest.json 파싱 실패 또는 형태 불일치"""
    kind = ImportErrorKind.CORRUPTED_DATA
    code = ImportErrorCode.INVALID_MANIFEST


class IncompatibleFormatError(LibraryArchiveError):
    """지원하지 않는 매니페스트 포맷 버전"""
    kind = ImportErrorKind.VERSION_CONFLICT
    code = ImportErrorCode.VERSION_INCOMPATIBLE
    can_retry = True


class ArchiveReadError(LibraryArchiveError):
    """아카이브 파일 읽기 실패"""
    kind = ImportErrorKind.FILE_READ_ERROR
    code = ImportErrorCode.FILE_READ_ERROR
    can_retry = True


class ArchiveWriteError(LibraryArchiveError):
    """아카이브 파일 쓰기 실패"""
    kind = ImportErrorKind.FILE_WRITE_ERROR
    code = ImportErrorCode.FILE_WRITE_ERROR
    can_retry = True


class CollectionNotFoundError(LibraryArchiveError):
    """내보낼 컬렉션 또는 스토리가 저장소에 없음"""
    kind = ImportErrorKind.UNKNOWN_ERROR
    code = ImportErrorCode.NOT_FOUND


class MissingDependencyError(LibraryArchiveError):
    """소유자/언어 참조를 해석할 수 없음"""
    kind = ImportErrorKind.MISSING_DEPENDENCIES
    code = ImportErrorCode.MISSING_DEPENDENCIES


def classify_exception(exception: BaseException) -> Tuple[ImportErrorKind, ImportErrorCode]:
    """
    예외를 (kind, code)로 분류

    Args:
        exception: 분류할 예외

    Returns:
        (ImportErrorKind, ImportErrorCode)
    """
    if isinstance(exception, LibraryArchiveError):
        return exception.kind, exception.code

    if isinstance(exception, IntegrityError):
        return ImportErrorKind.MISSING_DEPENDENCIES, ImportErrorCode.MISSING_DEPENDENCIES

    if isinstance(exception, OSError):
        return ImportErrorKind.FILE_READ_ERROR, ImportErrorCode.FILE_READ_ERROR

    # 메시지 기반 추론
    message = str(exception).lower()
    if "manifest.json" in message:
        return ImportErrorKind.UNKNOWN_ERROR, ImportErrorCode.MISSING_MANIFEST
    elif "parse" in message:
        return ImportErrorKind.UNKNOWN_ERROR, ImportErrorCode.INVALID_MANIFEST
    elif "read" in message:
        return ImportErrorKind.UNKNOWN_ERROR, ImportErrorCode.FILE_READ_ERROR
    elif "write" in message:
        return ImportErrorKind.UNKNOWN_ERROR, ImportErrorCode.FILE_WRITE_ERROR

    return ImportErrorKind.UNKNOWN_ERROR, ImportErrorCode.UNKNOWN_ERROR


def error_from_exception(
    exception: BaseException,
    details: Optional[ImportErrorDetails] = None,
    can_retry: Optional[bool] = None,
) -> ImportErrorInfo:
    """
    예외를 ImportErrorInfo로 변환하고 로깅

    Args:
        exception: 변환할 예외
        details: 컬렉션 식별 정보
        can_retry: 재시도 가능 여부 (None이면 예외 기본값)
    """
    kind, code = classify_exception(exception)
    if can_retry is None:
        can_retry = getattr(exception, "can_retry", False)

    error = ImportErrorInfo(
        kind=kind,
        code=code,
        message=str(exception) or type(exception).__name__,
        can_retry=can_retry,
        details=details,
    )
    logger.error(f"[{error.code.value}] {error.kind.value}: {error.message}")
    return error
