"""
ZIP 아카이브 코덱

이름이 붙은 텍스트/바이너리 엔트리로 아카이브를 만들고 읽습니다.
엔트리 내용의 의미는 검증하지 않습니다.
"""

import io
import zipfile
import zlib
from dataclasses import dataclass
from typing import Iterable, List, Union

from core.logging_config import setup_logger
from errors.errors import CorruptedArchiveError

logger = setup_logger(__name__)

# 엔트리 하나당 최대 압축 해제 크기
MAX_ENTRY_BYTES = 64 * 1024 * 1024

_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, ValueError)


@dataclass
class ArchiveEntry:
    """아카이브 엔트리"""
    path: str
    content: Union[str, bytes]
    is_binary: bool = False

    def to_bytes(self) -> bytes:
        if self.is_binary or isinstance(self.content, bytes):
            return bytes(self.content)
        return self.content.encode("utf-8")


def create_archive(entries: Iterable[ArchiveEntry], compression_level: int = 6) -> bytes:
    """
    엔트리 목록으로 DEFLATE 압축 ZIP 생성

    Args:
        entries: 아카이브에 넣을 엔트리
        compression_level: 0-9 (0 = 무압축 deflate)

    Returns:
        ZIP 바이트
    """
    if not isinstance(compression_level, int) or not 0 <= compression_level <= 9:
        raise ValueError(f"compression level must be 0-9, got {compression_level!r}")

    buffer = io.BytesIO()
    count = 0
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED, compresslevel=compression_level) as zf:
        for entry in entries:
            zf.writestr(entry.path, entry.to_bytes())
            count += 1

    data = buffer.getvalue()
    logger.debug(f"Created archive with {count} entries ({len(data)} bytes, level={compression_level})")
    return data


class ArchiveHandle:
    """열린 아카이브 - 경로별 엔트리 조회"""

    def __init__(self, zf: zipfile.ZipFile):
        self._zf = zf
        self._infos = {info.filename: info for info in zf.infolist() if not info.is_dir()}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self._zf.close()

    def names(self) -> List[str]:
        """디렉토리를 제외한 엔트리 경로 목록"""
        return list(self._infos.keys())

    def has(self, path: str) -> bool:
        return path in self._infos

    def read_bytes(self, path: str) -> bytes:
        """엔트리 원본 바이트"""
        info = self._infos.get(path)
        if info is None:
            raise KeyError(path)
        if info.file_size > MAX_ENTRY_BYTES:
            raise CorruptedArchiveError(
                f"Archive entry {path} is too large ({info.file_size} bytes)"
            )
        try:
            return self._zf.read(info)
        except _READ_ERRORS as e:
            raise CorruptedArchiveError(f"Corrupted archive entry {path}: {e}") from e

    def read_text(self, path: str) -> str:
        """엔트리를 UTF-8 텍스트로 조회"""
        data = self.read_bytes(path)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptedArchiveError(f"Archive entry {path} is not valid UTF-8") from e


def open_archive(data: bytes) -> ArchiveHandle:
    """
    ZIP 바이트 열기

    Raises:
        CorruptedArchiveError: 손상되었거나 잘린 컨테이너
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError, OSError) as e:
        raise CorruptedArchiveError(f"Corrupted archive: {e}") from e

    handle = ArchiveHandle(zf)
    logger.debug(f"Opened archive with {len(handle.names())} entries")
    return handle
