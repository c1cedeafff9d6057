"""
스토리 텍스트 코덱 테스트
"""

import pytest

from archive.frame_text import (
    decode_story,
    encode_story,
    extract_source_reference,
    extract_title,
)
from models.records import FrameRecord, StoryMetadata, StoryRecord


def _story(title="The Creation", source_reference=None):
    return StoryRecord(
        collection_id="owner/obs",
        story_number=1,
        title=title,
        metadata=StoryMetadata(source_reference=source_reference),
    )


def _frame(number, url, text):
    return FrameRecord(
        collection_id="owner/obs", story_number=1, frame_number=number,
        image_url=url, text=text,
    )


class TestEncode:
    """인코딩 테스트"""

    def test_encode_layout(self):
        """제목, 이미지 줄, 텍스트, 출처 줄 순서"""
        content = encode_story(
            _story(source_reference="Genesis 1-2"),
            [_frame(1, "img1.jpg", "text A"), _frame(2, "img2.jpg", "text B")],
        )

        assert content == (
            "# The Creation\n\n"
            "![OBS Image](img1.jpg)\n\n"
            "text A\n\n"
            "![OBS Image](img2.jpg)\n\n"
            "text B\n\n"
            "_Genesis 1-2_\n"
        )

    def test_encode_without_source_reference(self):
        content = encode_story(_story(), [_frame(1, "a.jpg", "A")])
        assert not content.rstrip().endswith("_")
        assert content.endswith("A\n\n")

    def test_encode_no_frames_omits_source_reference(self):
        """프레임이 없으면 출처 줄도 없음"""
        content = encode_story(_story(source_reference="Genesis 1"), [])
        assert content == "# The Creation\n\n"


class TestDecode:
    """디코딩 테스트"""

    def test_extract_title(self):
        assert extract_title("# Hello\n\nbody") == "Hello"
        assert extract_title("Hello\n") is None

    def test_title_after_byte_order_mark(self):
        """BOM으로 시작하는 파일도 제목 인식"""
        story = decode_story("\ufeff# The Creation\n\n![OBS Image](a.jpg)\n\ntext\n", 1)
        assert story.title == "The Creation"
        assert extract_title("\ufeff# Hello\n") == "Hello"

    def test_default_title(self):
        """제목 줄이 없으면 Story n"""
        story = decode_story("![OBS Image](a.jpg)\n\nsome text\n", 7)
        assert story.title == "Story 7"
        assert len(story.frames) == 1

    def test_decode_frames_in_order(self):
        content = (
            "# Title\n\n"
            "![OBS Image](one.jpg)\n\nfirst\n\n"
            "![OBS Image](two.jpg)\n\nsecond\nline\n\n"
        )
        story = decode_story(content, 1)

        assert [f.frame_number for f in story.frames] == [1, 2]
        assert [f.image_url for f in story.frames] == ["one.jpg", "two.jpg"]
        assert story.frames[1].text == "second\nline"

    def test_source_reference_is_not_frame_text(self):
        """출처 줄은 마지막 프레임 텍스트에 섞이지 않음"""
        content = "# T\n\n![OBS Image](a.jpg)\n\nlast text\n\n_Genesis 1-2_\n"
        story = decode_story(content, 1)

        assert story.source_reference == "Genesis 1-2"
        assert story.frames[0].text == "last text"

    def test_extract_source_reference_ignores_partial_underscores(self):
        reference, body = extract_source_reference("text\n_not a reference\n")
        assert reference is None
        assert body == "text\n_not a reference\n"

    def test_empty_text_frame_is_dropped_without_gap(self):
        """빈 프레임은 제외되고 번호는 연속"""
        content = (
            "# T\n\n"
            "![OBS Image](a.jpg)\n\nA\n\n"
            "![OBS Image](b.jpg)\n\n   \n\n"
            "![OBS Image](c.jpg)\n\nC\n"
        )
        story = decode_story(content, 1)

        assert story.dropped_frames == 1
        assert [(f.frame_number, f.image_url) for f in story.frames] == [(1, "a.jpg"), (2, "c.jpg")]

    def test_empty_reference_is_not_a_frame(self):
        story = decode_story("# T\n\n![OBS Image]()\n\ntext\n", 1)
        assert story.frames == []

    def test_adjacent_tokens(self):
        """텍스트 없이 붙은 이미지 토큰"""
        story = decode_story("![x](a.jpg)![x](b.jpg)\nB", 1)
        assert story.dropped_frames == 1
        assert story.frames[0].image_url == "b.jpg"
        assert story.frames[0].text == "B"

    def test_no_frames(self):
        story = decode_story("# Only a title\n", 3)
        assert story.title == "Only a title"
        assert story.frames == []
        assert story.source_reference is None


@pytest.mark.parametrize("texts", [
    ["text A", "text B"],
    ["한국어 텍스트", "multi\nline\ntext"],
    ["single"],
])
def test_round_trip(texts):
    """encode -> decode 왕복 시 프레임 보존"""
    frames = [_frame(i, f"https://cdn.example.org/{i}.jpg", t) for i, t in enumerate(texts, start=1)]
    decoded = decode_story(encode_story(_story(source_reference="Ref 1:1"), frames), 1)

    assert decoded.title == "The Creation"
    assert decoded.source_reference == "Ref 1:1"
    assert [(f.frame_number, f.image_url, f.text) for f in decoded.frames] == [
        (f.frame_number, f.image_url, f.text) for f in frames
    ]


def _frame_tuples(decoded):
    return [(f.frame_number, f.image_url, f.text) for f in decoded.frames]


def _reencode(decoded):
    frames = [_frame(f.frame_number, f.image_url, f.text) for f in decoded.frames]
    return encode_story(_story(decoded.title, decoded.source_reference), frames)


@pytest.mark.parametrize("content", [
    "# Title\n![OBS Image](a.jpg)\nfirst\n![OBS Image](b.jpg)\nsecond\n_Genesis 1_",
    "# Title\r\n\r\n![OBS Image](a.jpg)\r\n\r\nfirst\r\nline\r\n\r\n"
    "![OBS Image](b.jpg)\r\n\r\nsecond\r\n\r\n_Genesis 1_\r\n",
    "# Title   \n\n![OBS Image](a.jpg)   \n\nfirst   \n\n"
    "![OBS Image](b.jpg)\t\n\nsecond \t \n\n   _Genesis 1_   \n\n",
    "![x](a.jpg)first![x](b.jpg)second",
    "# T\n\n![OBS Image](a.jpg)\n\ntext _with_ underscores\n\n_Genesis 1-2_",
], ids=["single-newline", "crlf", "trailing-whitespace", "adjacent", "source-reference"])
def test_reencode_preserves_frames(content):
    """비정규 텍스트 decode -> encode -> decode 시 프레임과 출처 보존"""
    decoded = decode_story(content, 1)
    assert decoded.dropped_frames == 0
    assert decoded.frames

    encoded = _reencode(decoded)
    again = decode_story(encoded, 1)

    assert again.title == decoded.title
    assert again.source_reference == decoded.source_reference
    assert _frame_tuples(again) == _frame_tuples(decoded)
    assert again.dropped_frames == 0
    # 정규 형식은 다시 인코딩해도 동일
    assert _reencode(again) == encoded
