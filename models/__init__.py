"""
모델 패키지

데이터베이스 모델 및 인메모리 레코드 정의
"""

from .database import (
    Base,
    Language,
    RepositoryOwner,
    Collection,
    Story,
    Frame,
)
from .records import (
    LanguageDescriptor,
    OwnerDescriptor,
    SourceEntry,
    CheckingInfo,
    CollectionMetadata,
    CollectionDescriptor,
    StoryMetadata,
    StoryRecord,
    FrameRecord,
    parse_timestamp,
    format_timestamp,
)

__all__ = [
    'Base',
    'Language',
    'RepositoryOwner',
    'Collection',
    'Story',
    'Frame',
    'LanguageDescriptor',
    'OwnerDescriptor',
    'SourceEntry',
    'CheckingInfo',
    'CollectionMetadata',
    'CollectionDescriptor',
    'StoryMetadata',
    'StoryRecord',
    'FrameRecord',
    'parse_timestamp',
    'format_timestamp',
]
