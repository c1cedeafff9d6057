"""
컬렉션 가져오기 파이프라인

아카이브 파일 하나를 저장소에 가져옵니다.
예외를 던지지 않고 항상 ImportOutcome을 반환합니다.

상태 전이:
    START -> ARCHIVE_OPENED -> MANIFEST_VALIDATED -> CONFLICT_CHECKED
          -> SKIPPED
          -> CONTENT_DECODED -> PERSISTED -> DONE
    어느 단계에서든 -> FAILED

저장 순서: 소유자 -> 언어 -> 컬렉션 -> 스토리 -> 프레임
모든 스토리는 첫 저장 전에 메모리에서 디코딩을 마칩니다.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from core.logging_config import setup_logger
from archive.frame_text import decode_story
from archive.layout import THUMBNAIL_ENTRY, USERDATA_ENTRY, parse_story_entry
from archive.manifest import ExportManifest, read_manifest
from archive.zip_codec import ArchiveHandle, open_archive
from db.batch_writer import BatchWriter
from db.crud import LibraryStore
from errors.errors import (
    ArchiveReadError,
    CorruptedArchiveError,
    ImportErrorCode,
    ImportErrorDetails,
    ImportErrorInfo,
    ImportErrorKind,
    IncompatibleFormatError,
    LibraryArchiveError,
    MissingDependencyError,
    Severity,
    error_from_exception,
)
from models.records import CollectionDescriptor, FrameRecord, StoryMetadata, StoryRecord
from pipeline.types import (
    ImportOptions,
    ImportOutcome,
    ImportStage,
    ProgressCallback,
    ProgressReporter,
)
from storage.thumbnails import ThumbnailStore
from versioning.version_manager import ConflictType, VersionConflict, detect_version_conflict, is_format_compatible

logger = setup_logger(__name__)


class CollectionImporter:
    """아카이브 -> 컬렉션 가져오기"""

    def __init__(
        self,
        store: LibraryStore,
        thumbnails: Optional[ThumbnailStore] = None,
        batch_writer: Optional[BatchWriter] = None,
    ):
        """
        Args:
            store: 라이브러리 저장소
            thumbnails: 썸네일 저장소 (없으면 썸네일 무시)
            batch_writer: 스토리/프레임 배치 저장 (기본값: store 기반 BatchWriter)
        """
        self.store = store
        self.thumbnails = thumbnails
        self.batch_writer = batch_writer or BatchWriter(store)

    def import_collection(
        self,
        path: Union[str, Path],
        options: Optional[ImportOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportOutcome:
        """
        아카이브 파일 가져오기

        Args:
            path: 아카이브 파일 경로
            options: 가져오기 옵션
            on_progress: (percent, status) 진행률 콜백
        """
        progress = ProgressReporter(on_progress)
        progress(0, "Reading import file...")

        try:
            data = Path(path).read_bytes()
        except OSError as e:
            outcome = ImportOutcome()
            return self._fail(outcome, ArchiveReadError(f"Failed to read import file {path}: {e}"))

        return self.import_bytes(data, options, progress)

    def import_bytes(
        self,
        data: bytes,
        options: Optional[ImportOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportOutcome:
        """메모리상의 아카이브 바이트 가져오기"""
        options = options or ImportOptions()
        progress = on_progress if isinstance(on_progress, ProgressReporter) else ProgressReporter(on_progress)
        outcome = ImportOutcome()

        progress(5, "Processing archive...")
        try:
            handle = open_archive(data)
        except LibraryArchiveError as e:
            return self._fail(outcome, e)
        outcome.stage = ImportStage.ARCHIVE_OPENED

        with handle:
            return self._import_from_handle(handle, options, progress, outcome)

    def _import_from_handle(
        self,
        handle: ArchiveHandle,
        options: ImportOptions,
        progress: ProgressReporter,
        outcome: ImportOutcome,
    ) -> ImportOutcome:
        progress(10, "Validating import file...")
        try:
            manifest = read_manifest(handle)
        except LibraryArchiveError as e:
            return self._fail(outcome, e)

        collection = manifest.collection
        details = ImportErrorDetails(
            import_version=collection.version,
            collection_id=collection.id,
            collection_name=collection.display_name,
            owner_name=manifest.owner_name,
            language=collection.language,
        )

        if not options.skip_version_check and not is_format_compatible(manifest.format_version):
            error = IncompatibleFormatError(
                f"Incompatible export format version: {manifest.format_version or 'unknown'}"
            )
            return self._fail(outcome, error, details)
        outcome.stage = ImportStage.MANIFEST_VALIDATED

        progress(20, "Checking for conflicts...")
        existing = self.store.get_collection(collection.id)
        conflict = detect_version_conflict(
            collection.id,
            existing.version if existing else None,
            collection.version,
        )
        details.existing_version = conflict.existing_version
        outcome.stage = ImportStage.CONFLICT_CHECKED

        if self._resolve_conflict(conflict, options, details, outcome):
            outcome.skipped = True
            outcome.stage = ImportStage.SKIPPED
            logger.info(f"Skipped import of {collection.id}: {outcome.errors[-1].kind.value}")
            return outcome

        try:
            self._check_dependencies(manifest)

            progress(30, "Processing stories...")
            stories, frames = self._decode_content(handle, collection.id, progress)
            if existing is not None:
                self._carry_over_favorites(collection.id, stories, frames)
            self._apply_user_data(handle, stories, frames, details, outcome)
            outcome.stage = ImportStage.CONTENT_DECODED

            progress(70, "Saving collection...")
            self._save_collection(manifest)

            progress(75, "Saving stories...")
            self.batch_writer.write(
                stories,
                frames,
                lambda percent: progress(75 + percent * 0.15, f"Saving frames... {round(percent)}%"),
            )
            outcome.stage = ImportStage.PERSISTED

            progress(90, "Processing thumbnail...")
            if self.thumbnails is not None and handle.has(THUMBNAIL_ENTRY):
                self.thumbnails.save_collection_thumbnail(collection.id, handle.read_bytes(THUMBNAIL_ENTRY))

            self._warn_frame_gaps(collection.id)
        except Exception as e:
            self._fail(outcome, e, details, can_retry=False)
            if options.rollback_on_failure and existing is None:
                self._rollback(collection.id)
            return outcome

        outcome.success = True
        outcome.imported_collection = collection.id
        outcome.stage = ImportStage.DONE
        progress(100, "Import complete!")
        logger.info(
            f"Imported {collection.id} v{collection.version}: "
            f"{len(stories)} stories, {len(frames)} frames"
        )
        return outcome

    def _fail(
        self,
        outcome: ImportOutcome,
        exception: BaseException,
        details: Optional[ImportErrorDetails] = None,
        can_retry: Optional[bool] = None,
    ) -> ImportOutcome:
        outcome.errors.append(error_from_exception(exception, details, can_retry))
        outcome.success = False
        outcome.stage = ImportStage.FAILED
        return outcome

    def _resolve_conflict(
        self,
        conflict: VersionConflict,
        options: ImportOptions,
        details: ImportErrorDetails,
        outcome: ImportOutcome,
    ) -> bool:
        """
        버전 충돌 처리

        Returns:
            건너뛰어야 하면 True
        """
        conflict_type = conflict.conflict_type
        if conflict_type == ConflictType.NONE:
            return False

        details.recommendation = conflict.recommendation
        existing_version = conflict.existing_version
        import_version = conflict.import_version

        if conflict_type == ConflictType.SAME:
            if options.overwrite_existing:
                logger.info(f"Re-importing {conflict.collection_id} v{import_version} over identical version")
                return False
            outcome.errors.append(ImportErrorInfo(
                kind=ImportErrorKind.DUPLICATE_COLLECTION,
                code=ImportErrorCode.DUPLICATE_COLLECTION,
                message=f"Collection already exists with the same version ({import_version})",
                can_retry=True,
                details=details,
            ))
            return True

        if conflict_type == ConflictType.INCOMING_OLDER:
            error = ImportErrorInfo(
                kind=ImportErrorKind.VERSION_CONFLICT,
                code=ImportErrorCode.VERSION_CONFLICT_OLDER,
                message=(
                    f"Importing older version ({import_version}) "
                    f"than existing ({existing_version})"
                ),
                can_retry=True,
                details=details,
            )
            if options.overwrite_existing:
                error.severity = Severity.WARNING
                outcome.errors.append(error)
                logger.warning(f"Overwriting {conflict.collection_id} v{existing_version} with older v{import_version}")
                return False
            outcome.errors.append(error)
            return True

        # INCOMING_NEWER
        if options.overwrite_existing:
            logger.info(f"Updating {conflict.collection_id} v{existing_version} -> v{import_version}")
            return False
        outcome.errors.append(ImportErrorInfo(
            kind=ImportErrorKind.VERSION_CONFLICT,
            code=ImportErrorCode.VERSION_CONFLICT_NEWER,
            message=(
                f"Newer version available ({import_version}) "
                f"than existing ({existing_version})"
            ),
            can_retry=True,
            details=details,
        ))
        return True

    def _check_dependencies(self, manifest: ExportManifest):
        """컬렉션이 참조하는 소유자/언어를 저장 전에 확인"""
        collection = manifest.collection

        owner_available = (
            manifest.owner is not None and manifest.owner.username == collection.owner
        ) or self.store.get_owner(collection.owner) is not None
        if not owner_available:
            raise MissingDependencyError(
                f"Repository owner {collection.owner} is not in the archive or the local library"
            )

        language_available = (
            manifest.language.lc == collection.language
            or self.store.get_language(collection.language) is not None
        )
        if not language_available:
            raise MissingDependencyError(
                f"Language {collection.language} is not in the archive or the local library"
            )

    def _save_collection(self, manifest: ExportManifest):
        """소유자, 언어, 컬렉션 순서로 저장"""
        if manifest.owner is not None:
            self.store.save_owner(manifest.owner)
        self.store.save_language(manifest.language)

        source = manifest.collection
        self.store.save_collection(CollectionDescriptor(
            id=source.id,
            owner=source.owner,
            language=source.language,
            display_name=source.display_name,
            version=source.version,
            image_set_id=source.image_set_id,
            last_updated=source.last_updated,
            is_downloaded=True,
            metadata=source.metadata,
        ))

    def _story_entries(self, handle: ArchiveHandle) -> List[Tuple[int, str]]:
        """스토리 번호순 엔트리 목록 (같은 번호는 content/ 우선)"""
        entries: Dict[int, str] = {}
        for path in sorted(handle.names(), key=lambda p: ("/ingredients/" in f"/{p.lower()}", p)):
            story_number = parse_story_entry(path)
            if story_number is None:
                continue
            if story_number in entries:
                logger.warning(f"Ignoring duplicate story entry {path} (using {entries[story_number]})")
                continue
            entries[story_number] = path
        return sorted(entries.items())

    def _decode_content(
        self,
        handle: ArchiveHandle,
        collection_id: str,
        progress: ProgressReporter,
    ) -> Tuple[List[StoryRecord], List[FrameRecord]]:
        """모든 스토리 엔트리를 메모리에서 디코딩"""
        entries = self._story_entries(handle)
        if not entries:
            raise CorruptedArchiveError("Invalid import file: missing content folder")
        stories: List[StoryRecord] = []
        frames: List[FrameRecord] = []

        for index, (story_number, path) in enumerate(entries):
            decoded = decode_story(handle.read_text(path), story_number)
            stories.append(StoryRecord(
                collection_id=collection_id,
                story_number=story_number,
                title=decoded.title,
                metadata=StoryMetadata(source_reference=decoded.source_reference),
            ))
            frames.extend(
                FrameRecord(
                    collection_id=collection_id,
                    story_number=story_number,
                    frame_number=frame.frame_number,
                    image_url=frame.image_url,
                    text=frame.text,
                )
                for frame in decoded.frames
            )
            if decoded.dropped_frames:
                logger.warning(f"Dropped {decoded.dropped_frames} empty frames from {path}")

            progress(30 + (index + 1) / len(entries) * 40, f"Processing stories... ({index + 1}/{len(entries)})")

        logger.info(f"Decoded {len(stories)} stories, {len(frames)} frames for {collection_id}")
        return stories, frames

    def _carry_over_favorites(
        self,
        collection_id: str,
        stories: List[StoryRecord],
        frames: List[FrameRecord],
    ):
        """덮어쓰기 시 로컬 즐겨찾기 유지"""
        favorite_stories = {
            story.story_number
            for story in self.store.get_stories_by_collection(collection_id)
            if story.is_favorite
        }
        favorite_frames = {
            (frame.story_number, frame.frame_number)
            for frame in self.store.get_frames_by_collection(collection_id)
            if frame.is_favorite
        }
        _mark_favorites(stories, frames, favorite_stories, favorite_frames)

    def _apply_user_data(
        self,
        handle: ArchiveHandle,
        stories: List[StoryRecord],
        frames: List[FrameRecord],
        details: ImportErrorDetails,
        outcome: ImportOutcome,
    ):
        """userdata.json 즐겨찾기 적용 (형식 오류는 경고만)"""
        if not handle.has(USERDATA_ENTRY):
            return

        try:
            data = json.loads(handle.read_text(USERDATA_ENTRY))
            favorite_stories = {int(n) for n in data.get("favoriteStories", [])}
            favorite_frames = {(int(s), int(f)) for s, f in data.get("favoriteFrames", [])}
        except (LibraryArchiveError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring malformed {USERDATA_ENTRY}: {e}")
            outcome.errors.append(ImportErrorInfo(
                kind=ImportErrorKind.UNKNOWN_ERROR,
                code=ImportErrorCode.USER_DATA_RESTORE_ERROR,
                message=f"Failed to restore user data: {e}",
                severity=Severity.WARNING,
                details=details,
            ))
            return

        _mark_favorites(stories, frames, favorite_stories, favorite_frames)
        logger.debug(
            f"Applied user data: {len(favorite_stories)} favorite stories, "
            f"{len(favorite_frames)} favorite frames"
        )

    def _warn_frame_gaps(self, collection_id: str):
        gaps = self.store.find_frame_gaps(collection_id)
        for story_number, missing in gaps.items():
            logger.warning(
                f"Frame numbers not contiguous in {collection_id} story {story_number}: missing {missing}"
            )

    def _rollback(self, collection_id: str):
        """실패한 신규 컬렉션 정리"""
        try:
            self.store.delete_collection(collection_id)
            if self.thumbnails is not None:
                self.thumbnails.delete_collection_thumbnail(collection_id)
            logger.info(f"Rolled back partially imported collection {collection_id}")
        except Exception as e:
            logger.error(f"Rollback of {collection_id} failed: {e}")


def _mark_favorites(
    stories: List[StoryRecord],
    frames: List[FrameRecord],
    favorite_stories: Set[int],
    favorite_frames: Set[Tuple[int, int]],
):
    for story in stories:
        if story.story_number in favorite_stories:
            story.is_favorite = True
    for frame in frames:
        if (frame.story_number, frame.frame_number) in favorite_frames:
            frame.is_favorite = True
