"""
데이터베이스 모델 정의

로컬 라이브러리 저장소의 테이블을 정의합니다.
- languages / repository_owners: 여러 컬렉션이 공유, 컬렉션 삭제 시에도 유지
- collections -> stories -> frames: 컬렉션 삭제 시 cascade
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, ForeignKeyConstraint,
    Boolean, Text, JSON, Index,
)
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime

Base = declarative_base()


class Language(Base):
    """언어 메타데이터"""
    __tablename__ = 'languages'

    lc = Column(String(32), primary_key=True)  # 언어 코드
    ln = Column(String(200), nullable=False)  # 고유 명칭
    ang = Column(String(200), nullable=False, default='')  # 영어 명칭
    ld = Column(String(3), nullable=False, default='ltr')  # ltr / rtl
    gw = Column(Boolean, nullable=False, default=False)  # gateway language
    hc = Column(String(10), nullable=False, default='')  # home country
    lr = Column(String(100), nullable=False, default='')  # region
    pk = Column(Integer, nullable=False, default=0)
    alt = Column(JSON, nullable=False, default=list)
    cc = Column(JSON, nullable=False, default=list)

    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_languages_gw', 'gw'),
    )


class RepositoryOwner(Base):
    """컬렉션 소유자 (개인/조직)"""
    __tablename__ = 'repository_owners'

    username = Column(String(200), primary_key=True)
    full_name = Column(String(300))
    email = Column(String(300))
    avatar_url = Column(String(1000))
    description = Column(Text)
    website = Column(String(1000))
    location = Column(String(300))
    visibility = Column(String(20), nullable=False, default='public')
    owner_type = Column(String(20), nullable=False, default='user')  # user / organization
    repository_languages = Column(JSON, nullable=False, default=list)
    repository_subjects = Column(JSON, nullable=False, default=list)
    social_links = Column(JSON)
    meta_data = Column(JSON)

    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    collections = relationship("Collection", back_populates="owner_ref")


class Collection(Base):
    """콘텐츠 라이브러리 (owner/name)"""
    __tablename__ = 'collections'

    id = Column(String(400), primary_key=True)
    owner = Column(String(200), ForeignKey('repository_owners.username'), nullable=False)
    language = Column(String(32), ForeignKey('languages.lc'), nullable=False)

    display_name = Column(String(500), nullable=False)
    version = Column(String(50), nullable=False)
    image_set_id = Column(String(100), nullable=False, default='default')
    last_updated = Column(DateTime, default=datetime.utcnow)
    is_downloaded = Column(Boolean, nullable=False, default=False)

    meta_data = Column(JSON)

    owner_ref = relationship("RepositoryOwner", back_populates="collections")
    stories = relationship(
        "Story",
        back_populates="collection",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index('idx_collections_owner', 'owner'),
        Index('idx_collections_language', 'language'),
    )


class Story(Base):
    """컬렉션 내 번호가 매겨진 스토리"""
    __tablename__ = 'stories'

    collection_id = Column(
        String(400),
        ForeignKey('collections.id', ondelete='CASCADE'),
        primary_key=True,
    )
    story_number = Column(Integer, primary_key=True)
    title = Column(String(500), nullable=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    meta_data = Column(JSON)

    collection = relationship("Collection", back_populates="stories")
    frames = relationship(
        "Frame",
        back_populates="story",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Frame.frame_number",
    )

    __table_args__ = (
        Index('idx_stories_favorite', 'is_favorite'),
    )


class Frame(Base):
    """스토리 내 이미지 + 텍스트 단위"""
    __tablename__ = 'frames'

    collection_id = Column(String(400), primary_key=True)
    story_number = Column(Integer, primary_key=True)
    frame_number = Column(Integer, primary_key=True)

    image_url = Column(String(2000), nullable=False)
    text = Column(Text, nullable=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    meta_data = Column(JSON)

    story = relationship("Story", back_populates="frames")

    # 복합 외래키
    __table_args__ = (
        ForeignKeyConstraint(
            ['collection_id', 'story_number'],
            ['stories.collection_id', 'stories.story_number'],
            ondelete='CASCADE',
        ),
        Index('idx_frames_favorite', 'is_favorite'),
        Index('idx_frames_story', 'collection_id', 'story_number'),
    )
