#!/usr/bin/env python
"""
컬렉션 공유 스크립트

컬렉션을 아카이브 파일로 내보내거나 아카이브를 라이브러리로 가져옵니다.

Usage:
    python share_collection.py export owner/name exports/name.zip          # 내보내기
    python share_collection.py export owner/name out.zip --user-data      # 즐겨찾기 포함
    python share_collection.py import exports/name.zip --overwrite        # 가져오기 (덮어쓰기)
    python share_collection.py inspect exports/name.zip                   # 아카이브 정보
    python share_collection.py list exports/                              # 가져올 수 있는 아카이브
"""

import argparse
import sys
from typing import List, Optional

from core.logging_config import setup_logger
from config import config
from db.crud import DatabaseManager, LibraryStore
from errors.errors import LibraryArchiveError
from pipeline import (
    CollectionExporter,
    CollectionImporter,
    ExportOptions,
    ImportOptions,
    inspect_archive,
    list_importable_archives,
)
from storage.thumbnails import ThumbnailStore

logger = setup_logger(__name__)


def _print_progress(percent: int, status: str):
    print(f"  [{percent:3d}%] {status}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="컬렉션 내보내기/가져오기")
    parser.add_argument("--database-url", type=str, help="데이터베이스 URL (기본: 환경변수)")
    parser.add_argument("--quiet", action="store_true", help="진행률 출력 안 함")
    subparsers = parser.add_subparsers(dest="command")

    export_parser = subparsers.add_parser("export", help="컬렉션을 아카이브로 내보내기")
    export_parser.add_argument("collection_id", help="컬렉션 ID (owner/name)")
    export_parser.add_argument("destination", help="저장할 아카이브 경로")
    export_parser.add_argument("--user-data", action="store_true", help="즐겨찾기 포함")
    export_parser.add_argument("--no-thumbnail", action="store_true", help="썸네일 제외")
    export_parser.add_argument(
        "--compression-level", type=int, default=config.DEFAULT_COMPRESSION_LEVEL,
        choices=range(0, 10), metavar="0-9", help="압축 레벨 (기본: 6)",
    )

    import_parser = subparsers.add_parser("import", help="아카이브 가져오기")
    import_parser.add_argument("archive", help="아카이브 파일 경로")
    import_parser.add_argument("--overwrite", action="store_true", help="기존 컬렉션 덮어쓰기")
    import_parser.add_argument("--skip-version-check", action="store_true", help="포맷 버전 검사 생략")
    import_parser.add_argument("--rollback-on-failure", action="store_true", help="실패 시 신규 컬렉션 삭제")

    inspect_parser = subparsers.add_parser("inspect", help="아카이브 정보 보기")
    inspect_parser.add_argument("archive", help="아카이브 파일 경로")

    list_parser = subparsers.add_parser("list", help="디렉토리의 아카이브 목록")
    list_parser.add_argument("directory", nargs="?", default=str(config.EXPORT_DIR), help="검색할 디렉토리")

    return parser


def _open_store(database_url: Optional[str]) -> LibraryStore:
    db = DatabaseManager(database_url)
    db.create_tables()
    return LibraryStore(db)


def run_export(args, store: LibraryStore) -> int:
    exporter = CollectionExporter(store, ThumbnailStore())
    options = ExportOptions(
        collection_id=args.collection_id,
        include_user_data=args.user_data,
        include_thumbnails=not args.no_thumbnail,
        compression_level=args.compression_level,
    )
    try:
        path = exporter.export_collection(
            args.destination, options, None if args.quiet else _print_progress
        )
    except LibraryArchiveError as e:
        print(f"❌ 내보내기 실패 [{e.code.value}]: {e}")
        return 1

    print(f"✅ 내보내기 완료: {path}")
    return 0


def run_import(args, store: LibraryStore) -> int:
    importer = CollectionImporter(store, ThumbnailStore())
    options = ImportOptions(
        overwrite_existing=args.overwrite,
        skip_version_check=args.skip_version_check,
        rollback_on_failure=args.rollback_on_failure,
    )
    outcome = importer.import_collection(args.archive, options, None if args.quiet else _print_progress)

    for error in outcome.errors:
        marker = "⚠️" if error.is_warning else "❌"
        recommendation = error.details.recommendation if error.details else None
        suffix = f" (권장: {recommendation.value})" if recommendation else ""
        print(f"{marker} [{error.code.value}] {error.kind.value}: {error.message}{suffix}")

    if outcome.success:
        print(f"✅ 가져오기 완료: {outcome.imported_collection}")
        return 0
    if outcome.skipped:
        print("⏭️  가져오기 건너뜀")
        return 0
    return 1


def run_inspect(args) -> int:
    summary = inspect_archive(args.archive)
    if summary is None:
        print(f"❌ 아카이브를 읽을 수 없습니다: {args.archive}")
        return 1

    print("=" * 60)
    print(f"📦 {summary.collection_name} ({summary.collection_id})")
    print("=" * 60)
    print(f"  소유자: {summary.owner_name}")
    print(f"  버전: {summary.version}")
    print(f"  언어: {summary.language}")
    print(f"  스토리: {summary.story_count}개")
    print(f"  내보낸 날짜: {summary.export_date.isoformat()}")
    return 0


def run_list(args) -> int:
    archives = list_importable_archives(args.directory)
    if not archives:
        print(f"📁 가져올 수 있는 아카이브가 없습니다: {args.directory}")
        return 0

    for archive in archives:
        summary = archive.summary
        print(f"  {archive.file_name}: {summary.collection_name} v{summary.version} ({summary.story_count} stories)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "inspect":
        return run_inspect(args)
    if args.command == "list":
        return run_list(args)

    store = _open_store(args.database_url)
    try:
        if args.command == "export":
            return run_export(args, store)
        return run_import(args, store)
    finally:
        store.db.close()


if __name__ == "__main__":
    sys.exit(main())
