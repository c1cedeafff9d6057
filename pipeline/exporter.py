"""
컬렉션 내보내기 파이프라인

저장소의 컬렉션 하나를 아카이브 파일로 내보냅니다.

진행률 단계:
    0   준비
    20  아카이브 생성
    30  스토리 인코딩
    60  썸네일
    70  소유자/언어 수집, 매니페스트
    90  압축
    95  파일 저장
    100 완료
"""

import json
from pathlib import Path
from typing import List, Optional, Union

from core.logging_config import setup_logger
from archive.frame_text import encode_story
from archive.layout import THUMBNAIL_ENTRY, USERDATA_ENTRY, story_entry_path
from archive.manifest import MANIFEST_ENTRY, ExportManifest, serialize_manifest
from archive.zip_codec import ArchiveEntry, create_archive
from db.crud import LibraryStore
from errors.errors import ArchiveWriteError, CollectionNotFoundError
from models.records import LanguageDescriptor, StoryRecord
from pipeline.types import (
    CollectionExportInfo,
    ExportOptions,
    ProgressCallback,
    ProgressReporter,
)
from storage.thumbnails import ThumbnailStore

logger = setup_logger(__name__)

# 예상 크기 계산용 근사치 (바이트)
STORY_SIZE_ESTIMATE = 500
FRAME_SIZE_ESTIMATE = 150
ARCHIVE_OVERHEAD_ESTIMATE = 5000


class CollectionExporter:
    """컬렉션 -> 아카이브 내보내기"""

    def __init__(self, store: LibraryStore, thumbnails: Optional[ThumbnailStore] = None):
        """
        Args:
            store: 라이브러리 저장소
            thumbnails: 썸네일 저장소 (없으면 썸네일 미포함)
        """
        self.store = store
        self.thumbnails = thumbnails

    def export_collection(
        self,
        destination: Union[str, Path],
        options: ExportOptions,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        컬렉션을 아카이브 파일로 내보내기

        Args:
            destination: 저장할 파일 경로
            options: 내보내기 옵션
            on_progress: (percent, status) 진행률 콜백

        Returns:
            저장된 파일 경로

        Raises:
            ValueError: 잘못된 압축 레벨
            CollectionNotFoundError: 컬렉션 또는 스토리 없음
            ArchiveWriteError: 파일 저장 실패
        """
        destination = Path(destination)
        progress = ProgressReporter(on_progress)

        data = self.build_archive(options, progress)

        progress(95, "Saving file...")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as e:
            raise ArchiveWriteError(f"Failed to write export file {destination}: {e}") from e

        progress(100, "Export complete!")
        logger.info(f"Exported {options.collection_id} to {destination} ({len(data)} bytes)")
        return destination

    def build_archive(
        self,
        options: ExportOptions,
        progress: Optional[ProgressReporter] = None,
    ) -> bytes:
        """아카이브 바이트 생성 (파일 저장 제외)"""
        options.validate()
        progress = progress or ProgressReporter()
        collection_id = options.collection_id

        progress(0, "Preparing export...")
        collection = self.store.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(f"Collection not found in database: {collection_id}")

        owner = self.store.get_owner(collection.owner)
        stories = self.store.get_stories_by_collection(collection_id)
        if not stories:
            raise CollectionNotFoundError(f"No stories found for collection: {collection_id}")

        progress(20, "Creating archive...")
        entries: List[ArchiveEntry] = []

        progress(30, "Processing stories...")
        favorite_frames = []
        for story in stories:
            frames = self.store.get_frames_by_story(collection_id, story.story_number)
            entries.append(
                ArchiveEntry(path=story_entry_path(story.story_number), content=encode_story(story, frames))
            )
            favorite_frames.extend(
                [frame.story_number, frame.frame_number] for frame in frames if frame.is_favorite
            )
        logger.debug(f"Encoded {len(stories)} stories for {collection_id}")

        progress(60, "Processing content metadata...")
        if options.include_thumbnails and self.thumbnails is not None:
            thumbnail = self.thumbnails.get_collection_thumbnail(collection_id)
            if thumbnail:
                entries.append(ArchiveEntry(path=THUMBNAIL_ENTRY, content=thumbnail, is_binary=True))

        progress(70, "Gathering collection, owner & language data...")
        language = self.store.get_language(collection.language)
        if language is None:
            logger.warning(
                f"Language {collection.language} not stored locally, exporting minimal descriptor"
            )
            language = LanguageDescriptor(lc=collection.language, ln=collection.display_name)
        if owner is None:
            logger.warning(f"Repository owner {collection.owner} not stored locally, exporting without it")

        if options.include_user_data:
            entries.append(ArchiveEntry(path=USERDATA_ENTRY, content=_user_data_json(stories, favorite_frames)))

        manifest = ExportManifest(collection=collection, language=language, owner=owner)
        entries.insert(0, ArchiveEntry(path=MANIFEST_ENTRY, content=serialize_manifest(manifest)))

        progress(90, "Compressing archive...")
        return create_archive(entries, options.compression_level)

    def get_export_info(self, collection_id: str) -> CollectionExportInfo:
        """
        내보내기 전 컬렉션 정보 및 예상 크기

        Raises:
            CollectionNotFoundError: 컬렉션 없음
        """
        collection = self.store.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(f"Collection not found in database: {collection_id}")

        owner = self.store.get_owner(collection.owner)
        story_count = len(self.store.get_stories_by_collection(collection_id))
        frame_count = self.store.count_frames(collection_id)

        estimated_size = (
            len(collection.display_name.encode("utf-8"))
            + story_count * STORY_SIZE_ESTIMATE
            + frame_count * FRAME_SIZE_ESTIMATE
            + ARCHIVE_OVERHEAD_ESTIMATE
        )

        return CollectionExportInfo(
            collection_id=collection.id,
            display_name=collection.display_name,
            language=collection.language,
            version=collection.version,
            owner_username=collection.owner,
            owner_name=owner.display_name if owner else collection.owner,
            story_count=story_count,
            frame_count=frame_count,
            estimated_size=estimated_size,
        )


def _user_data_json(stories: List[StoryRecord], favorite_frames: List[List[int]]) -> str:
    """즐겨찾기 -> userdata.json"""
    data = {
        "favoriteStories": [story.story_number for story in stories if story.is_favorite],
        "favoriteFrames": favorite_frames,
    }
    return json.dumps(data, indent=2)
