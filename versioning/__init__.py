"""
Versioning Module

컬렉션 버전 비교
- 점 구분 숫자 버전 비교
- 포맷 호환성 검사
- 충돌 판정
"""

from versioning.version_manager import (
    parse_version,
    compare_versions,
    is_format_compatible,
    ConflictType,
    VersionConflict,
    detect_version_conflict,
)

__all__ = [
    "parse_version",
    "compare_versions",
    "is_format_compatible",
    "ConflictType",
    "VersionConflict",
    "detect_version_conflict",
]
