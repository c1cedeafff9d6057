"""
Archive Module

컬렉션 아카이브 포맷
- ZIP 컨테이너 코덱
- 스토리 텍스트 코덱
- 매니페스트 코덱
"""

from archive.zip_codec import (
    ArchiveEntry,
    ArchiveHandle,
    create_archive,
    open_archive,
)
from archive.frame_text import (
    DecodedFrame,
    DecodedStory,
    encode_story,
    decode_story,
    extract_source_reference,
)
from archive.manifest import (
    MANIFEST_ENTRY,
    ExportManifest,
    manifest_to_dict,
    manifest_from_dict,
    serialize_manifest,
    parse_manifest,
    read_manifest,
)
from archive.layout import (
    CONTENT_FOLDERS,
    THUMBNAIL_ENTRY,
    USERDATA_ENTRY,
    story_entry_path,
    parse_story_entry,
)

__all__ = [
    "ArchiveEntry",
    "ArchiveHandle",
    "create_archive",
    "open_archive",
    "DecodedFrame",
    "DecodedStory",
    "encode_story",
    "decode_story",
    "extract_source_reference",
    "MANIFEST_ENTRY",
    "ExportManifest",
    "manifest_to_dict",
    "manifest_from_dict",
    "serialize_manifest",
    "parse_manifest",
    "read_manifest",
    "CONTENT_FOLDERS",
    "THUMBNAIL_ENTRY",
    "USERDATA_ENTRY",
    "story_entry_path",
    "parse_story_entry",
]
