"""
아카이브 파일 레이아웃

    manifest.json
    content/<NN>.md        스토리당 하나 (NN = 0 채움 스토리 번호)
    content/thumbnail.jpg  선택
    userdata.json          선택 (즐겨찾기)

읽을 때는 content/ 대신 ingredients/ 폴더도 허용합니다.
"""

import re
from typing import Optional

CONTENT_FOLDER = "content"
CONTENT_FOLDERS = ("content", "ingredients")
THUMBNAIL_ENTRY = f"{CONTENT_FOLDER}/thumbnail.jpg"
USERDATA_ENTRY = "userdata.json"

_STORY_ENTRY_RE = re.compile(r"^(?:.*/)?(?:content|ingredients)/(\d+)\.md$", re.IGNORECASE)


def story_entry_path(story_number: int) -> str:
    """스토리 번호 -> content/01.md"""
    return f"{CONTENT_FOLDER}/{story_number:02d}.md"


def parse_story_entry(path: str) -> Optional[int]:
    """스토리 엔트리 경로면 스토리 번호, 아니면 None"""
    match = _STORY_ENTRY_RE.match(path)
    if not match:
        return None
    story_number = int(match.group(1))
    return story_number if story_number > 0 else None
