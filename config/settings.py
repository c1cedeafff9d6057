"""
컬렉션 공유 설정 관리

환경 변수 및 애플리케이션 설정을 관리합니다.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# .env 파일 로드
load_dotenv()


class Config:
    """애플리케이션 설정"""

    DEBUG = False
    TESTING = False

    # 프로젝트 경로
    BASE_DIR = Path(__file__).parent.parent
    DATA_DIR = Path(os.getenv("LIBRARY_DATA_DIR", str(BASE_DIR / "data")))
    EXPORT_DIR = DATA_DIR / "exports"
    THUMBNAIL_DIR = DATA_DIR / "thumbnails"
    LOGS_DIR = Path(os.getenv("LIBRARY_LOGS_DIR", str(BASE_DIR / "logs")))

    # 앱 정보 (매니페스트에 기록)
    APP_NAME: str = os.getenv("APP_NAME", "OBS App")
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")

    # 아카이브 포맷 버전 - 코덱이 지원하는 유일한 버전
    MANIFEST_FORMAT_VERSION = "1.0.0"

    # 데이터베이스 설정
    DB_URL_OVERRIDE: Optional[str] = os.getenv("DATABASE_URL")

    @property
    def DATABASE_URL(self) -> str:
        """SQLAlchemy 데이터베이스 URL"""
        if self.DB_URL_OVERRIDE:
            return self.DB_URL_OVERRIDE
        return f"sqlite:///{self.DATA_DIR / 'library.db'}"

    # 아카이브 설정
    DEFAULT_COMPRESSION_LEVEL: int = int(os.getenv("DEFAULT_COMPRESSION_LEVEL", "6"))

    # 배치 저장 설정
    STORY_BATCH_SIZE: int = int(os.getenv("STORY_BATCH_SIZE", "200"))
    FRAME_BATCH_SIZE: int = int(os.getenv("FRAME_BATCH_SIZE", "500"))

    @classmethod
    def ensure_directories(cls):
        """필수 디렉토리 생성"""
        for directory in [cls.DATA_DIR, cls.EXPORT_DIR, cls.THUMBNAIL_DIR, cls.LOGS_DIR]:
            directory.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """개발 환경 설정"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """프로덕션 환경 설정"""
    DEBUG = False
    TESTING = False


class TestConfig(Config):
    """테스트 환경 설정"""
    DEBUG = True
    TESTING = True

    @property
    def DATABASE_URL(self) -> str:
        """테스트용 SQLite 데이터베이스 URL"""
        return "sqlite:///:memory:"


# 환경별 설정 선택
_env = os.getenv("ENVIRONMENT", "development").lower()
if _env == "production":
    config = ProductionConfig()
elif _env == "test":
    config = TestConfig()
else:
    config = DevelopmentConfig()

# 디렉토리 생성
config.ensure_directories()
