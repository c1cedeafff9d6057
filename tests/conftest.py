"""
테스트 설정 및 픽스처
"""

import os
import pytest
import tempfile
import shutil
from datetime import datetime
from pathlib import Path

# 테스트 환경 설정 - 모든 import 이전에 설정
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from db.crud import DatabaseManager, LibraryStore
from models.records import (
    CollectionDescriptor,
    CollectionMetadata,
    FrameRecord,
    LanguageDescriptor,
    OwnerDescriptor,
    StoryMetadata,
    StoryRecord,
)
from storage.thumbnails import ThumbnailStore

COLLECTION_ID = "unfoldingWord/en_obs"


@pytest.fixture(scope="function")
def test_db():
    """테스트용 인메모리 데이터베이스 (각 테스트마다 새로 생성)"""
    db = DatabaseManager("sqlite:///:memory:")
    db.create_tables()
    try:
        yield db
    finally:
        db.drop_tables()
        db.close()


@pytest.fixture
def store(test_db):
    """라이브러리 저장소"""
    return LibraryStore(test_db)


@pytest.fixture(scope="function")
def temp_dir():
    """임시 디렉토리 생성"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def thumbnails(temp_dir):
    """임시 디렉토리 썸네일 저장소"""
    return ThumbnailStore(temp_dir / "thumbnails")


@pytest.fixture
def sample_language():
    """샘플 언어"""
    return LanguageDescriptor(
        lc="en", ln="English", ang="English", ld="ltr", gw=True,
        hc="US", lr="Americas", pk=1747, alt=["Anglais"], cc=["US", "GB"],
    )


@pytest.fixture
def sample_owner():
    """샘플 소유자"""
    return OwnerDescriptor(
        username="unfoldingWord",
        full_name="unfoldingWord",
        description="Open Bible Stories publisher",
        website="https://unfoldingword.org",
        owner_type="organization",
        repository_languages=["en"],
        repository_subjects=["Open Bible Stories"],
    )


@pytest.fixture
def sample_collection():
    """샘플 컬렉션"""
    return CollectionDescriptor(
        id=COLLECTION_ID,
        owner="unfoldingWord",
        language="en",
        display_name="Open Bible Stories",
        version="1.0.0",
        last_updated=datetime(2024, 1, 15, 12, 30, 0),
        metadata=CollectionMetadata(description="50 stories", rights="CC BY-SA 4.0"),
    )


@pytest.fixture
def sample_story():
    """샘플 스토리 (The Creation)"""
    return StoryRecord(
        collection_id=COLLECTION_ID,
        story_number=1,
        title="The Creation",
        metadata=StoryMetadata(source_reference="Genesis 1-2"),
    )


@pytest.fixture
def sample_frames():
    """샘플 프레임 2개"""
    return [
        FrameRecord(
            collection_id=COLLECTION_ID, story_number=1, frame_number=1,
            image_url="img1.jpg", text="text A",
        ),
        FrameRecord(
            collection_id=COLLECTION_ID, story_number=1, frame_number=2,
            image_url="img2.jpg", text="text B",
        ),
    ]


@pytest.fixture
def populated_store(store, sample_language, sample_owner, sample_collection, sample_story, sample_frames):
    """샘플 컬렉션이 저장된 저장소"""
    store.save_owner(sample_owner)
    store.save_language(sample_language)
    store.save_collection(sample_collection)
    store.save_story(sample_story)
    for frame in sample_frames:
        store.save_frame(frame)
    return store
