"""
배치 저장 테스트
"""

import pytest

from db.batch_writer import BatchWriter
from db.crud import DatabaseManager, LibraryStore
from models.records import FrameRecord, StoryMetadata, StoryRecord

COLLECTION_ID = "unfoldingWord/en_obs"
FRAME_COUNT = 1234


def _stories():
    return [
        StoryRecord(
            collection_id=COLLECTION_ID,
            story_number=n,
            title=f"Story {n}",
            metadata=StoryMetadata(source_reference=f"Ref {n}"),
        )
        for n in range(1, 4)
    ]


def _frames():
    frames = []
    for index in range(FRAME_COUNT):
        story_number = index % 3 + 1
        frames.append(FrameRecord(
            collection_id=COLLECTION_ID,
            story_number=story_number,
            frame_number=index // 3 + 1,
            image_url=f"https://cdn.example.org/{index}.jpg",
            text=f"frame text {index}",
        ))
    return frames


def _new_store(sample_owner, sample_language, sample_collection):
    db = DatabaseManager("sqlite:///:memory:")
    db.create_tables()
    store = LibraryStore(db)
    store.save_owner(sample_owner)
    store.save_language(sample_language)
    store.save_collection(sample_collection)
    return store


def _snapshot(store):
    stories = [
        (s.story_number, s.title, s.is_favorite, s.metadata.to_dict())
        for s in store.get_stories_by_collection(COLLECTION_ID)
    ]
    frames = [
        (f.story_number, f.frame_number, f.image_url, f.text, f.is_favorite)
        for f in store.get_frames_by_collection(COLLECTION_ID)
    ]
    return stories, frames


@pytest.fixture
def seeded_store(sample_owner, sample_language, sample_collection):
    store = _new_store(sample_owner, sample_language, sample_collection)
    yield store
    store.db.close()


class TestBatchWriter:
    """배치 upsert 테스트"""

    def test_invalid_batch_size(self, store):
        with pytest.raises(ValueError):
            BatchWriter(store, frame_batch_size=-1)

    def test_writes_all_records(self, seeded_store):
        writer = BatchWriter(seeded_store)
        writer.write(_stories(), _frames())

        assert len(seeded_store.get_stories_by_collection(COLLECTION_ID)) == 3
        assert seeded_store.count_frames(COLLECTION_ID) == FRAME_COUNT
        assert seeded_store.get_story(COLLECTION_ID, 2).metadata.source_reference == "Ref 2"

    def test_chunk_progress(self, seeded_store):
        """500개 단위 청크마다 진행률 보고"""
        reported = []
        BatchWriter(seeded_store).write(_stories(), _frames(), reported.append)

        assert len(reported) == 3
        assert reported == sorted(reported)
        assert reported[-1] == pytest.approx(100.0)

    def test_upsert_updates_existing_rows(self, seeded_store):
        writer = BatchWriter(seeded_store)
        writer.write(_stories(), _frames())

        updated = _frames()[:10]
        for frame in updated:
            frame.text = "updated"
        writer.save_frames(updated)

        assert seeded_store.count_frames(COLLECTION_ID) == FRAME_COUNT
        assert seeded_store.get_frame(COLLECTION_ID, 1, 1).text == "updated"

    def test_chunk_size_independence(self, seeded_store, sample_owner, sample_language, sample_collection):
        """한 번에 저장한 결과와 1/3씩 나눠 저장한 결과가 같음"""
        BatchWriter(seeded_store).write(_stories(), _frames())

        split_store = _new_store(sample_owner, sample_language, sample_collection)
        try:
            frames = _frames()
            third = len(frames) // 3
            parts = [frames[:third], frames[third:2 * third], frames[2 * third:]]

            BatchWriter(split_store, story_batch_size=1).save_stories(_stories())
            for part, batch_size in zip(parts, [7, 200, 1000]):
                BatchWriter(split_store, frame_batch_size=batch_size).save_frames(part)

            assert _snapshot(split_store) == _snapshot(seeded_store)
        finally:
            split_store.db.close()

    def test_empty_input(self, seeded_store):
        reported = []
        BatchWriter(seeded_store).write([], [], reported.append)
        assert reported == []
        assert seeded_store.count_frames(COLLECTION_ID) == 0
