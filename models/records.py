"""
인메모리 레코드 정의

파이프라인 실행 중에만 존재하는 레코드입니다.
저장소(LibraryStore)에 전달되기 전까지는 영속화되지 않습니다.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def parse_timestamp(value: Any) -> datetime:
    """
    ISO-8601 문자열을 naive UTC datetime으로 변환

    'Z' 접미사와 밀리초 표기를 모두 허용합니다.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    """naive UTC datetime -> '2024-01-01T00:00:00.000Z'"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


@dataclass
class LanguageDescriptor:
    """언어 메타데이터 (lc가 조인 키)"""
    lc: str
    ln: str
    ang: str = ""
    ld: str = "ltr"
    gw: bool = False
    hc: str = ""
    lr: str = ""
    pk: int = 0
    alt: List[str] = field(default_factory=list)
    cc: List[str] = field(default_factory=list)


@dataclass
class OwnerDescriptor:
    """컬렉션 소유자"""
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    visibility: str = "public"
    owner_type: str = "user"
    repository_languages: List[str] = field(default_factory=list)
    repository_subjects: List[str] = field(default_factory=list)
    social_links: Optional[Dict[str, str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


@dataclass
class SourceEntry:
    """원본 자료 참조"""
    identifier: str
    language: str
    version: str


@dataclass
class CheckingInfo:
    """검수 정보"""
    checking_entity: List[str] = field(default_factory=list)
    checking_level: Optional[str] = None


@dataclass
class CollectionMetadata:
    """
    컬렉션 확장 메타데이터

    알려진 키는 명시적 필드로, 알 수 없는 키는 extra에 보존합니다.
    """
    description: Optional[str] = None
    target_audience: Optional[str] = None
    publisher: Optional[str] = None
    rights: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    issued: Optional[str] = None
    modified: Optional[str] = None
    relation: Optional[List[str]] = None
    source: Optional[List[SourceEntry]] = None
    checking: Optional[CheckingInfo] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    SIMPLE_KEYS = (
        "description", "target_audience", "publisher", "rights",
        "subject", "creator", "issued", "modified", "relation",
    )

    def to_dict(self) -> Dict[str, Any]:
        """저장소 JSON 컬럼과 manifest.json 공용 딕셔너리 (None 값은 생략)"""
        data: Dict[str, Any] = dict(self.extra)
        for key in self.SIMPLE_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.source is not None:
            data["source"] = [
                {"identifier": s.identifier, "language": s.language, "version": s.version}
                for s in self.source
            ]
        if self.checking is not None:
            checking: Dict[str, Any] = {"checking_entity": list(self.checking.checking_entity)}
            if self.checking.checking_level is not None:
                checking["checking_level"] = self.checking.checking_level
            data["checking"] = checking
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["CollectionMetadata"]:
        if not data:
            return None

        known = set(cls.SIMPLE_KEYS) | {"source", "checking"}
        metadata = cls(extra={k: v for k, v in data.items() if k not in known})
        for key in cls.SIMPLE_KEYS:
            setattr(metadata, key, data.get(key))

        if data.get("source") is not None:
            metadata.source = [
                SourceEntry(
                    identifier=str(s.get("identifier", "")),
                    language=str(s.get("language", "")),
                    version=str(s.get("version", "")),
                )
                for s in data["source"]
            ]
        checking = data.get("checking")
        if checking is not None:
            metadata.checking = CheckingInfo(
                checking_entity=list(checking.get("checking_entity") or []),
                checking_level=checking.get("checking_level"),
            )
        return metadata


@dataclass
class CollectionDescriptor:
    """컬렉션 (id = owner/name)"""
    id: str
    owner: str
    language: str
    display_name: str
    version: str
    image_set_id: str = "default"
    last_updated: datetime = field(default_factory=datetime.utcnow)
    is_downloaded: bool = False
    metadata: Optional[CollectionMetadata] = None


@dataclass
class StoryMetadata:
    """스토리 메타데이터 (sourceReference, scope + 미지 키)"""
    source_reference: Optional[str] = None
    scope: Optional[Dict[str, List[str]]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.source_reference is None and self.scope is None and not self.extra

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.source_reference is not None:
            data["sourceReference"] = self.source_reference
        if self.scope is not None:
            data["scope"] = self.scope
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StoryMetadata":
        data = dict(data or {})
        return cls(
            source_reference=data.pop("sourceReference", None),
            scope=data.pop("scope", None),
            extra=data,
        )


@dataclass
class StoryRecord:
    """컬렉션 내 스토리 ((collection_id, story_number)가 키)"""
    collection_id: str
    story_number: int
    title: str
    is_favorite: bool = False
    metadata: StoryMetadata = field(default_factory=StoryMetadata)

    @property
    def key(self):
        return (self.collection_id, self.story_number)


@dataclass
class FrameRecord:
    """스토리 내 프레임 ((collection_id, story_number, frame_number)가 키)"""
    collection_id: str
    story_number: int
    frame_number: int
    image_url: str
    text: str
    is_favorite: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self):
        return (self.collection_id, self.story_number, self.frame_number)
