"""
매니페스트 코덱

ExportManifest <-> manifest.json 변환
- 저장되는 필드명은 와이어 계약이므로 인메모리 필드명과 독립적으로 명시
- 컬렉션 메타데이터는 CollectionMetadata.to_dict() 형식을 그대로 사용
- owner, 확장 메타데이터는 없어도 허용
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from config import config
from core.logging_config import setup_logger
from errors.errors import ManifestInvalidError, ManifestMissingError
from models.records import (
    CheckingInfo,
    CollectionDescriptor,
    CollectionMetadata,
    LanguageDescriptor,
    OwnerDescriptor,
    SourceEntry,
    format_timestamp,
    parse_timestamp,
)

logger = setup_logger(__name__)

MANIFEST_ENTRY = "manifest.json"

# 소유자: 인메모리 필드 -> 와이어 필드
_OWNER_FIELDS = {
    "full_name": "full_name",
    "email": "email",
    "avatar_url": "avatar_url",
    "description": "description",
    "website": "website",
    "location": "location",
    "social_links": "social_links",
    "metadata": "metadata",
}


@dataclass
class ExportManifest:
    """아카이브에 포함되는 메타데이터 레코드"""
    collection: CollectionDescriptor
    language: LanguageDescriptor
    owner: Optional[OwnerDescriptor] = None
    format_version: str = field(default_factory=lambda: config.MANIFEST_FORMAT_VERSION)
    app_name: str = field(default_factory=lambda: config.APP_NAME)
    app_version: str = field(default_factory=lambda: config.APP_VERSION)
    exported_date: datetime = field(default_factory=datetime.utcnow)

    @property
    def owner_name(self) -> str:
        if self.owner and self.owner.full_name:
            return self.owner.full_name
        return self.collection.owner


# ===== 직렬화 =====

def _owner_to_wire(owner: OwnerDescriptor) -> Dict[str, Any]:
    wire: Dict[str, Any] = {"username": owner.username}
    for attr, key in _OWNER_FIELDS.items():
        value = getattr(owner, attr)
        if value is not None:
            wire[key] = value
    wire["visibility"] = owner.visibility
    wire["owner_type"] = owner.owner_type
    wire["repository_languages"] = list(owner.repository_languages)
    wire["repository_subjects"] = list(owner.repository_subjects)
    return wire


def manifest_to_dict(manifest: ExportManifest) -> Dict[str, Any]:
    """ExportManifest -> 와이어 딕셔너리"""
    collection = manifest.collection
    collection_wire: Dict[str, Any] = {
        "id": collection.id,
        "owner_username": collection.owner,
        "language_code": collection.language,
        "display_name": collection.display_name,
        "version": collection.version,
        "image_set_id": collection.image_set_id,
        "last_updated_timestamp": format_timestamp(collection.last_updated),
    }
    if collection.metadata is not None:
        collection_wire["metadata"] = collection.metadata.to_dict()

    language = manifest.language
    data: Dict[str, Any] = {
        "manifestFormatVersion": manifest.format_version,
        "appName": manifest.app_name,
        "appVersion": manifest.app_version,
        "exportedDate": format_timestamp(manifest.exported_date),
        "collection": collection_wire,
    }
    if manifest.owner is not None:
        data["repositoryOwner"] = _owner_to_wire(manifest.owner)
    data["language"] = {
        "lc": language.lc,
        "ln": language.ln,
        "ang": language.ang,
        "ld": language.ld,
        "gw": language.gw,
        "hc": language.hc,
        "lr": language.lr,
        "pk": language.pk,
        "alt": list(language.alt),
        "cc": list(language.cc),
    }
    return data


def serialize_manifest(manifest: ExportManifest) -> str:
    """ExportManifest -> manifest.json 텍스트"""
    return json.dumps(manifest_to_dict(manifest), indent=2, ensure_ascii=False)


# ===== 역직렬화 =====

def _require_object(data: Any, path: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ManifestInvalidError(f"Failed to parse manifest.json: '{path}' must be an object")
    return data


def _require_str(data: Dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ManifestInvalidError(f"Failed to parse manifest.json: '{path}.{key}' must be a non-empty string")
    return value


def _optional_str(data: Dict[str, Any], key: str, path: str, default: Optional[str] = None) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ManifestInvalidError(f"Failed to parse manifest.json: '{path}.{key}' must be a string")
    return value


def _str_list(data: Dict[str, Any], key: str, path: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestInvalidError(f"Failed to parse manifest.json: '{path}.{key}' must be a list of strings")
    return list(value)


def _timestamp(value: Any, path: str) -> datetime:
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError) as e:
        raise ManifestInvalidError(f"Failed to parse manifest.json: '{path}' is not a valid timestamp") from e


def _collection_metadata_from_wire(data: Any) -> Optional[CollectionMetadata]:
    if data is None:
        return None
    data = _require_object(data, "collection.metadata")

    known = set(CollectionMetadata.SIMPLE_KEYS) | {"source", "checking"}
    metadata = CollectionMetadata(extra={k: v for k, v in data.items() if k not in known})
    for key in CollectionMetadata.SIMPLE_KEYS:
        setattr(metadata, key, data.get(key))

    source = data.get("source")
    if source is not None:
        if not isinstance(source, list):
            raise ManifestInvalidError("Failed to parse manifest.json: 'collection.metadata.source' must be a list")
        entries = []
        for item in source:
            item = _require_object(item, "collection.metadata.source[]")
            entries.append(
                SourceEntry(
                    identifier=str(item.get("identifier", "")),
                    language=str(item.get("language", "")),
                    version=str(item.get("version", "")),
                )
            )
        metadata.source = entries

    checking = data.get("checking")
    if checking is not None:
        checking = _require_object(checking, "collection.metadata.checking")
        metadata.checking = CheckingInfo(
            checking_entity=_str_list(checking, "checking_entity", "collection.metadata.checking"),
            checking_level=_optional_str(checking, "checking_level", "collection.metadata.checking"),
        )
    return metadata


def _owner_from_wire(data: Any) -> Optional[OwnerDescriptor]:
    if data is None:
        return None
    data = _require_object(data, "repositoryOwner")

    social_links = data.get("social_links")
    if social_links is not None:
        social_links = _require_object(social_links, "repositoryOwner.social_links")
    metadata = data.get("metadata")
    if metadata is not None:
        metadata = _require_object(metadata, "repositoryOwner.metadata")

    return OwnerDescriptor(
        username=_require_str(data, "username", "repositoryOwner"),
        full_name=_optional_str(data, "full_name", "repositoryOwner"),
        email=_optional_str(data, "email", "repositoryOwner"),
        avatar_url=_optional_str(data, "avatar_url", "repositoryOwner"),
        description=_optional_str(data, "description", "repositoryOwner"),
        website=_optional_str(data, "website", "repositoryOwner"),
        location=_optional_str(data, "location", "repositoryOwner"),
        visibility=_optional_str(data, "visibility", "repositoryOwner", "public"),
        owner_type=_optional_str(data, "owner_type", "repositoryOwner", "user"),
        repository_languages=_str_list(data, "repository_languages", "repositoryOwner"),
        repository_subjects=_str_list(data, "repository_subjects", "repositoryOwner"),
        social_links=social_links,
        metadata=metadata,
    )


def _language_from_wire(data: Any) -> LanguageDescriptor:
    data = _require_object(data, "language")
    lc = _require_str(data, "lc", "language")

    pk = data.get("pk", 0)
    if isinstance(pk, bool) or not isinstance(pk, int):
        raise ManifestInvalidError("Failed to parse manifest.json: 'language.pk' must be an integer")

    return LanguageDescriptor(
        lc=lc,
        ln=_optional_str(data, "ln", "language") or lc,
        ang=_optional_str(data, "ang", "language", ""),
        ld="rtl" if data.get("ld") == "rtl" else "ltr",
        gw=bool(data.get("gw", False)),
        hc=_optional_str(data, "hc", "language", ""),
        lr=_optional_str(data, "lr", "language", ""),
        pk=pk,
        alt=_str_list(data, "alt", "language"),
        cc=_str_list(data, "cc", "language"),
    )


def manifest_from_dict(data: Any) -> ExportManifest:
    """
    와이어 딕셔너리 -> ExportManifest

    Raises:
        ManifestInvalidError: 기대하는 형태가 아님
    """
    data = _require_object(data, "manifest")
    collection_data = _require_object(data.get("collection"), "collection")

    exported_raw = data.get("exportedDate")
    exported_date = _timestamp(exported_raw, "exportedDate") if exported_raw else datetime.utcnow()

    last_updated_raw = collection_data.get("last_updated_timestamp")
    last_updated = (
        _timestamp(last_updated_raw, "collection.last_updated_timestamp")
        if last_updated_raw else exported_date
    )

    collection = CollectionDescriptor(
        id=_require_str(collection_data, "id", "collection"),
        owner=_require_str(collection_data, "owner_username", "collection"),
        language=_require_str(collection_data, "language_code", "collection"),
        display_name=_require_str(collection_data, "display_name", "collection"),
        version=_require_str(collection_data, "version", "collection"),
        image_set_id=_optional_str(collection_data, "image_set_id", "collection", "default"),
        last_updated=last_updated,
        metadata=_collection_metadata_from_wire(collection_data.get("metadata")),
    )

    return ExportManifest(
        collection=collection,
        language=_language_from_wire(data.get("language")),
        owner=_owner_from_wire(data.get("repositoryOwner")),
        format_version=_optional_str(data, "manifestFormatVersion", "manifest", ""),
        app_name=_optional_str(data, "appName", "manifest", ""),
        app_version=_optional_str(data, "appVersion", "manifest", ""),
        exported_date=exported_date,
    )


def parse_manifest(text: str) -> ExportManifest:
    """manifest.json 텍스트 -> ExportManifest"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestInvalidError(f"Failed to parse manifest.json: {e}") from e
    return manifest_from_dict(data)


def read_manifest(handle) -> ExportManifest:
    """
    열린 아카이브에서 매니페스트 읽기

    Raises:
        ManifestMissingError: manifest.json 엔트리 없음
        ManifestInvalidError: 파싱 불가
    """
    if not handle.has(MANIFEST_ENTRY):
        raise ManifestMissingError("Invalid import file: missing manifest.json")

    manifest = parse_manifest(handle.read_text(MANIFEST_ENTRY))
    logger.debug(
        f"Read manifest for {manifest.collection.id} "
        f"(format {manifest.format_version}, version {manifest.collection.version})"
    )
    return manifest
