"""
로깅 설정 및 유틸리티
"""

import sys
from loguru import logger
from config import config

_configured_modules = set()


def setup_logger(module_name: str = "library-share"):
    """
    로거 설정

    Args:
        module_name: 모듈 이름 (로그 파일명에 사용)
    """
    # 이미 설정된 모듈은 핸들러를 중복 등록하지 않음
    if module_name in _configured_modules:
        return logger

    if not _configured_modules:
        # 기본 핸들러 제거
        logger.remove()

        # 콘솔 출력 (INFO 이상)
        logger.add(
            sys.stdout,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level="INFO" if not config.DEBUG else "DEBUG",
            colorize=True
        )

    _configured_modules.add(module_name)

    # 파일 출력 (DEBUG 이상)
    log_file = config.LOGS_DIR / f"{module_name}.log"
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        filter=lambda record: record["name"] == module_name or module_name == "library-share",
        rotation="10 MB",
        retention="30 days",
        compression="zip"
    )

    # 에러 로그 (ERROR 이상)
    error_log_file = config.LOGS_DIR / f"{module_name}_error.log"
    logger.add(
        error_log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="ERROR",
        filter=lambda record: record["name"] == module_name or module_name == "library-share",
        rotation="10 MB",
        retention="90 days",
        compression="zip"
    )

    return logger


# 기본 로거 초기화
setup_logger()
