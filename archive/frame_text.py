"""
스토리 텍스트 코덱

스토리 하나를 마크다운 형태의 텍스트로 변환합니다.

    # <제목>

    ![OBS Image](<이미지 참조>)

    <프레임 텍스트>

    ...

    _<출처 참조>_

디코딩은 두 단계 스캐너로 처리합니다.
1단계: 이미지 토큰 위치 탐색
2단계: 연속한 토큰 사이의 텍스트 분할
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core.logging_config import setup_logger
from models.records import FrameRecord, StoryRecord

logger = setup_logger(__name__)

IMAGE_ALT_TEXT = "OBS Image"


@dataclass
class DecodedFrame:
    """디코딩된 프레임"""
    frame_number: int
    image_url: str
    text: str


@dataclass
class DecodedStory:
    """디코딩된 스토리"""
    title: str
    source_reference: Optional[str] = None
    frames: List[DecodedFrame] = field(default_factory=list)
    dropped_frames: int = 0


@dataclass
class _ImageToken:
    start: int
    end: int
    reference: str


def encode_story(story: StoryRecord, frames: Sequence[FrameRecord]) -> str:
    """
    스토리와 프레임을 텍스트로 인코딩

    출처 참조 줄은 마지막 프레임 뒤에만 붙습니다.
    """
    parts = [f"# {story.title}\n\n"]
    for frame in frames:
        parts.append(f"![{IMAGE_ALT_TEXT}]({frame.image_url})\n\n")
        parts.append(f"{frame.text}\n\n")

    source_reference = story.metadata.source_reference if story.metadata else None
    if frames and source_reference:
        parts.append(f"_{source_reference}_\n")

    return "".join(parts)


def extract_title(content: str) -> Optional[str]:
    """첫 줄이 '# '으로 시작하면 제목 반환"""
    first_line = content.lstrip("\ufeff").split("\n", 1)[0].strip()
    if first_line.startswith("# "):
        title = first_line[2:].strip()
        return title or None
    return None


def extract_source_reference(content: str) -> Tuple[Optional[str], str]:
    """
    마지막 비어 있지 않은 줄이 _..._ 형태면 출처 참조로 분리

    Returns:
        (출처 참조 또는 None, 해당 줄을 제거한 본문)
    """
    lines = content.split("\n")

    for index in range(len(lines) - 1, -1, -1):
        line = lines[index].strip()
        if not line:
            continue

        if len(line) > 2 and line.startswith("_") and line.endswith("_"):
            reference = line[1:-1].strip()
            if reference:
                lines[index] = ""
                return reference, "\n".join(lines).strip()
        break

    return None, content


def _locate_image_tokens(body: str) -> List[_ImageToken]:
    """1단계: ![alt](reference) 토큰 위치 탐색"""
    tokens: List[_ImageToken] = []
    position = 0

    while True:
        start = body.find("![", position)
        if start < 0:
            break

        close = body.find("]", start + 2)
        if close < 0:
            break
        if not body.startswith("(", close + 1):
            position = start + 2
            continue

        end = body.find(")", close + 2)
        if end < 0:
            break

        reference = body[close + 2:end]
        if not reference:
            position = start + 2
            continue

        tokens.append(_ImageToken(start=start, end=end + 1, reference=reference))
        position = end + 1

    return tokens


def decode_story(content: str, story_number: int) -> DecodedStory:
    """
    텍스트를 스토리로 디코딩

    참조 또는 텍스트가 빈 프레임은 경고 후 제외하며,
    프레임 번호는 성공한 프레임만으로 1부터 연속으로 매깁니다.

    Args:
        content: 스토리 텍스트
        story_number: 제목이 없을 때 기본 제목에 사용
    """
    title = extract_title(content) or f"Story {story_number}"

    # 출처 참조 줄이 프레임 텍스트로 섞이지 않도록 먼저 제거
    source_reference, body = extract_source_reference(content)

    story = DecodedStory(title=title, source_reference=source_reference)
    tokens = _locate_image_tokens(body)

    # 2단계: 토큰 사이 텍스트 분할
    for index, token in enumerate(tokens):
        text_end = tokens[index + 1].start if index + 1 < len(tokens) else len(body)
        image_url = token.reference.strip()
        text = body[token.end:text_end].strip()

        if not image_url or not text:
            story.dropped_frames += 1
            logger.warning(
                f"Skipping empty frame at offset {token.start} in story {story_number}"
            )
            continue

        story.frames.append(
            DecodedFrame(
                frame_number=len(story.frames) + 1,
                image_url=image_url,
                text=text,
            )
        )

    return story
