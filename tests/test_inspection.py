"""
아카이브 미리보기 테스트
"""

from datetime import datetime

import pytest

from archive.manifest import ExportManifest, serialize_manifest
from archive.zip_codec import ArchiveEntry, create_archive
from pipeline.inspection import inspect_archive, list_importable_archives


@pytest.fixture
def archive_bytes(sample_collection, sample_language, sample_owner):
    manifest = ExportManifest(
        collection=sample_collection,
        language=sample_language,
        owner=sample_owner,
        exported_date=datetime(2024, 3, 1, 9, 0, 0),
    )
    return create_archive([
        ArchiveEntry(path="manifest.json", content=serialize_manifest(manifest)),
        ArchiveEntry(path="content/01.md", content="# One\n"),
        ArchiveEntry(path="content/02.md", content="# Two\n"),
        ArchiveEntry(path="content/thumbnail.jpg", content=b"\xff", is_binary=True),
    ])


class TestInspectArchive:
    """아카이브 요약 테스트"""

    def test_summary(self, archive_bytes, temp_dir):
        path = temp_dir / "obs.zip"
        path.write_bytes(archive_bytes)

        summary = inspect_archive(path)

        assert summary.collection_id == "unfoldingWord/en_obs"
        assert summary.collection_name == "Open Bible Stories"
        assert summary.owner_name == "unfoldingWord"
        assert summary.version == "1.0.0"
        assert summary.language == "English"
        assert summary.story_count == 2
        assert summary.export_date == datetime(2024, 3, 1, 9, 0, 0)

    def test_unreadable_file(self, temp_dir):
        path = temp_dir / "broken.zip"
        path.write_bytes(b"garbage")
        assert inspect_archive(path) is None

    def test_missing_file(self, temp_dir):
        assert inspect_archive(temp_dir / "nothing.zip") is None

    def test_missing_manifest(self, temp_dir):
        path = temp_dir / "empty.zip"
        path.write_bytes(create_archive([ArchiveEntry(path="content/01.md", content="# One\n")]))
        assert inspect_archive(path) is None


class TestListImportableArchives:
    """가져오기 가능한 아카이브 목록"""

    def test_lists_valid_archives_only(self, archive_bytes, temp_dir):
        (temp_dir / "b.obs").write_bytes(archive_bytes)
        (temp_dir / "a.zip").write_bytes(archive_bytes)
        (temp_dir / "broken.zip").write_bytes(b"garbage")
        (temp_dir / "notes.txt").write_text("not an archive")

        archives = list_importable_archives(temp_dir)

        assert [a.file_name for a in archives] == ["a.zip", "b.obs"]
        assert archives[0].summary.story_count == 2

    def test_missing_directory(self, temp_dir):
        assert list_importable_archives(temp_dir / "nope") == []
