"""
Version Manager

점 구분 버전 문자열 비교 및 충돌 판정
- 컴포넌트별 정수 비교 (1.10 > 1.9)
- 누락된 뒤쪽 컴포넌트는 0으로 취급 (1.2 == 1.2.0)
- 매니페스트 포맷 버전 호환성 검사
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from config import config
from errors.errors import Recommendation


def _parse_component(component: str) -> int:
    """숫자가 아닌 컴포넌트는 0으로 취급"""
    try:
        return int(component.strip())
    except ValueError:
        return 0


def parse_version(version: str) -> List[int]:
    """'1.2.3' -> [1, 2, 3]"""
    return [_parse_component(part) for part in str(version).split(".")]


def compare_versions(a: str, b: str) -> int:
    """
    두 버전 문자열 비교

    Args:
        a: 비교 대상 버전
        b: 기준 버전

    Returns:
        -1 (a < b), 0 (a == b), 1 (a > b)
    """
    parts_a = parse_version(a)
    parts_b = parse_version(b)
    length = max(len(parts_a), len(parts_b))

    for i in range(length):
        part_a = parts_a[i] if i < len(parts_a) else 0
        part_b = parts_b[i] if i < len(parts_b) else 0

        if part_a < part_b:
            return -1
        if part_a > part_b:
            return 1

    return 0


def is_format_compatible(format_version: Optional[str]) -> bool:
    """매니페스트 포맷 버전이 지원 버전과 정확히 일치하는지"""
    return format_version == config.MANIFEST_FORMAT_VERSION


class ConflictType(Enum):
    """기존 컬렉션 대비 들어오는 컬렉션의 상태"""
    NONE = "none"  # 기존 컬렉션 없음
    SAME = "same"  # 동일 버전
    INCOMING_NEWER = "incoming_newer"
    INCOMING_OLDER = "incoming_older"


@dataclass
class VersionConflict:
    """버전 충돌 정보"""
    collection_id: str
    existing_version: Optional[str]
    import_version: str
    conflict_type: ConflictType

    @property
    def recommendation(self) -> Recommendation:
        if self.conflict_type == ConflictType.INCOMING_NEWER:
            return Recommendation.OVERWRITE
        return Recommendation.SKIP


def detect_version_conflict(
    collection_id: str,
    existing_version: Optional[str],
    import_version: str,
) -> VersionConflict:
    """
    기존 컬렉션 버전과 들어오는 버전 비교

    Args:
        collection_id: 컬렉션 ID
        existing_version: 로컬 컬렉션 버전 (없으면 None)
        import_version: 아카이브의 컬렉션 버전
    """
    if existing_version is None:
        conflict_type = ConflictType.NONE
    else:
        comparison = compare_versions(existing_version, import_version)
        if comparison == 0:
            conflict_type = ConflictType.SAME
        elif comparison > 0:
            conflict_type = ConflictType.INCOMING_OLDER
        else:
            conflict_type = ConflictType.INCOMING_NEWER

    return VersionConflict(
        collection_id=collection_id,
        existing_version=existing_version,
        import_version=import_version,
        conflict_type=conflict_type,
    )
