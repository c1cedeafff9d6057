"""
배치 저장

대량의 스토리/프레임 레코드를 청크 단위 upsert로 저장합니다.
청크 크기는 트랜잭션/구문 크기 제한용이며 최종 상태에는 영향을 주지 않습니다.
"""

from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.dialects import postgresql, sqlite

from config import config
from core.logging_config import setup_logger
from db.crud import LibraryStore, frame_row_values, story_row_values
from models.database import Frame, Story
from models.records import FrameRecord, StoryRecord

logger = setup_logger(__name__)

_STORY_KEY = ["collection_id", "story_number"]
_STORY_UPDATE = ["title", "is_favorite", "meta_data"]
_FRAME_KEY = ["collection_id", "story_number", "frame_number"]
_FRAME_UPDATE = ["image_url", "text", "is_favorite", "meta_data"]

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _chunks(items: Sequence, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BatchWriter:
    """
    스토리/프레임 배치 upsert

    - 스토리: 최대 200개 단위
    - 프레임: 최대 500개 단위, 청크마다 진행률 보고
    """

    def __init__(
        self,
        store: LibraryStore,
        story_batch_size: Optional[int] = None,
        frame_batch_size: Optional[int] = None,
    ):
        self.store = store
        self.story_batch_size = story_batch_size or config.STORY_BATCH_SIZE
        self.frame_batch_size = frame_batch_size or config.FRAME_BATCH_SIZE

        if self.story_batch_size <= 0 or self.frame_batch_size <= 0:
            raise ValueError("batch sizes must be positive")

    def _upsert(self, session, model, rows: List[Dict], key: List[str], update: List[str]):
        """방언별 INSERT ... ON CONFLICT DO UPDATE, 미지원 방언은 merge"""
        insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
        if insert is None:
            for row in rows:
                session.merge(model(**row))
            return

        stmt = insert(model).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=key,
            set_={column: getattr(stmt.excluded, column) for column in update},
        )
        session.execute(stmt)

    def save_stories(self, stories: Sequence[StoryRecord]):
        """스토리 배치 upsert (단일 트랜잭션)"""
        if not stories:
            return

        with self.store.transaction() as session:
            for batch in _chunks(stories, self.story_batch_size):
                rows = [story_row_values(story) for story in batch]
                self._upsert(session, Story, rows, _STORY_KEY, _STORY_UPDATE)
                logger.debug(f"Upserted {len(rows)} stories")

        logger.info(f"Saved {len(stories)} stories")

    def save_frames(
        self,
        frames: Sequence[FrameRecord],
        on_progress: Optional[Callable[[float], None]] = None,
    ):
        """
        프레임 배치 upsert (단일 트랜잭션)

        Args:
            frames: 저장할 프레임
            on_progress: 청크마다 호출, 0-100 진행률
        """
        if not frames:
            return

        total_batches = (len(frames) + self.frame_batch_size - 1) // self.frame_batch_size

        with self.store.transaction() as session:
            for index, batch in enumerate(_chunks(frames, self.frame_batch_size), start=1):
                rows = [frame_row_values(frame) for frame in batch]
                self._upsert(session, Frame, rows, _FRAME_KEY, _FRAME_UPDATE)
                logger.debug(f"Upserted frame batch {index}/{total_batches} ({len(rows)} frames)")

                if on_progress:
                    on_progress(index / total_batches * 100)

        logger.info(f"Saved {len(frames)} frames")

    def write(
        self,
        stories: Sequence[StoryRecord],
        frames: Sequence[FrameRecord],
        on_progress: Optional[Callable[[float], None]] = None,
    ):
        """스토리 먼저, 그다음 프레임 저장"""
        self.save_stories(stories)
        self.save_frames(frames, on_progress)
