"""
아카이브 미리보기

가져오기 전에 매니페스트만 읽어 표시 정보를 만듭니다.
"""

from pathlib import Path
from typing import List, Optional, Union

from core.logging_config import setup_logger
from archive.layout import parse_story_entry
from archive.manifest import read_manifest
from archive.zip_codec import open_archive
from errors.errors import LibraryArchiveError
from pipeline.types import ArchiveSummary, ImportableArchive

logger = setup_logger(__name__)

ARCHIVE_SUFFIXES = (".zip", ".obs")


def inspect_archive(path: Union[str, Path]) -> Optional[ArchiveSummary]:
    """
    아카이브 요약 정보 조회

    Args:
        path: 아카이브 파일 경로

    Returns:
        ArchiveSummary 또는 읽을 수 없으면 None
    """
    try:
        data = Path(path).read_bytes()
        with open_archive(data) as handle:
            manifest = read_manifest(handle)
            story_numbers = {
                number for number in (parse_story_entry(name) for name in handle.names())
                if number is not None
            }
    except (OSError, LibraryArchiveError) as e:
        logger.warning(f"Cannot inspect archive {path}: {e}")
        return None

    collection = manifest.collection
    return ArchiveSummary(
        collection_id=collection.id,
        collection_name=collection.display_name,
        owner_name=manifest.owner_name,
        version=collection.version,
        language=manifest.language.ln,
        story_count=len(story_numbers),
        export_date=manifest.exported_date,
    )


def list_importable_archives(directory: Union[str, Path]) -> List[ImportableArchive]:
    """
    디렉토리의 가져오기 가능한 아카이브 목록 (파일명순)

    읽을 수 없는 파일은 건너뜁니다.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Import directory does not exist: {directory}")
        return []

    archives = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() not in ARCHIVE_SUFFIXES:
            continue
        summary = inspect_archive(path)
        if summary is None:
            continue
        archives.append(ImportableArchive(file_name=path.name, summary=summary))

    logger.debug(f"Found {len(archives)} importable archives in {directory}")
    return archives
