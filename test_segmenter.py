"""챕터 분할기 테스트

제목 줄 판정(길이 경계 포함)과 서문/챕터 분할 검증
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from txt2book.stages.chapter import ChapterKey
from txt2book.stages.segmenter import ChapterSegmenter, segment
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)


def test_example_novel():
    """서문 + 두 챕터"""
    lines = ["前言内容", "第一章 开端", "主角登场", "第二章 冲突", "情节展开"]
    chapters = segment(lines)

    assert len(chapters) == 3
    assert chapters[0].is_preface
    assert chapters[0].lines == ("前言内容",)
    assert chapters[1].heading == "第一章 开端"
    assert chapters[1].lines == ("主角登场",)
    assert chapters[2].heading == "第二章 冲突"
    assert chapters[2].lines == ("情节展开",)


def test_no_headings():
    """제목이 없으면 서문 하나에 모든 줄"""
    lines = ["只是普通的一段文字", "另一行"]
    chapters = segment(lines)

    assert len(chapters) == 1
    assert chapters[0].key == ChapterKey.PREFACE
    assert chapters[0].lines == ("只是普通的一段文字", "另一行")


def test_empty_input_still_has_preface():
    chapters = segment([])
    assert len(chapters) == 1
    assert chapters[0].is_preface
    assert chapters[0].lines == ()


def test_heading_on_first_line_gives_empty_preface():
    chapters = segment(["第一章 开端", "正文"])
    assert chapters[0].is_preface
    assert chapters[0].lines == ()
    assert chapters[1].heading == "第一章 开端"
    assert chapters[1].lines == ("正文",)


def test_consecutive_headings():
    """연속된 제목 줄 → 앞 챕터는 본문 없음"""
    chapters = segment(["第一部 风起", "第一章 开端", "正文"])

    assert [ch.heading for ch in chapters] == [None, "第一部 风起", "第一章 开端"]
    assert chapters[1].lines == ()
    assert chapters[2].lines == ("正文",)


def test_repeated_heading_lines_are_kept_apart():
    """같은 제목 줄이 두 번 나와도 본문이 덮어써지지 않음"""
    chapters = segment(["第一章", "上", "第一章", "下"])

    assert [ch.heading for ch in chapters] == [None, "第一章", "第一章"]
    assert chapters[1].lines == ("上",)
    assert chapters[2].lines == ("下",)


def test_all_markers():
    segmenter = ChapterSegmenter()
    assert segmenter.is_heading("第三章")
    assert segmenter.is_heading("第十二节 夜话")
    assert segmenter.is_heading("第一百零一章")  # 零은 숫자 집합 밖이지만 .* 구간에 포함
    assert segmenter.is_heading("第二部")
    assert segmenter.is_heading("正文 第五章 归来")
    assert not segmenter.is_heading("第3章")
    assert not segmenter.is_heading("第一回")
    assert not segmenter.is_heading("")


def test_prefix_length_boundary():
    """제목 앞 글자 수: 4자는 제목, 5자는 본문"""
    segmenter = ChapterSegmenter()
    assert segmenter.is_heading("卷一上篇第一章")
    assert not segmenter.is_heading("卷一上篇啊第一章")


def test_marker_length_boundary():
    """'第...章' 구간 글자 수: 11자는 제목, 12자는 본문"""
    segmenter = ChapterSegmenter()
    marker_11 = "第一二三四五六七八九章"
    marker_12 = "第一二三四五六七八九十章"
    assert len(marker_11) == 11
    assert len(marker_12) == 12
    assert segmenter.is_heading(marker_11)
    assert not segmenter.is_heading(marker_12)


def test_tail_is_not_gated():
    """'章' 뒤의 부제목은 길이 제한 없음"""
    segmenter = ChapterSegmenter()
    assert segmenter.is_heading("第一章 " + "很长的副标题" * 10)


def test_prose_mentioning_marker_is_body():
    """본문 속 '第...章' 언급은 제목이 아님"""
    line = "他翻开书，读到了第三章的时候，天已经亮了，窗外传来鸟叫声"
    chapters = segment(["第一章 开端", line])
    assert len(chapters) == 2
    assert chapters[1].lines == (line,)


def test_concatenation_reproduces_body_lines():
    """모든 챕터 본문을 이어 붙이면 제목 줄을 뺀 원문과 같음"""
    lines = [
        "序",
        "",
        "第一章 开端",
        "甲",
        "后来他读到第三章的时候睡着了",
        "第二章",
        "第三章 转折",
        "乙",
        "",
        "丙",
    ]
    segmenter = ChapterSegmenter()
    chapters = segmenter.split_lines(lines)

    body = [line for ch in chapters for line in ch.lines]
    expected = [line for line in lines if not segmenter.is_heading(line)]
    assert body == expected
    assert [ch.heading for ch in chapters[1:]] == ["第一章 开端", "第二章", "第三章 转折"]


def test_find_headings():
    segmenter = ChapterSegmenter()
    lines = ["前言", "第一章 开端", "正文", "第二章 冲突"]
    assert segmenter.find_headings(lines) == [
        {"line_num": 1, "text": "第一章 开端"},
        {"line_num": 3, "text": "第二章 冲突"},
    ]


def main():
    """테스트 실행"""
    print("=" * 50)
    print("Chapter Segmenter Tests")
    print("=" * 50)

    test_example_novel()
    test_no_headings()
    test_empty_input_still_has_preface()
    test_heading_on_first_line_gives_empty_preface()
    test_consecutive_headings()
    test_repeated_heading_lines_are_kept_apart()
    test_all_markers()
    test_prefix_length_boundary()
    test_marker_length_boundary()
    test_tail_is_not_gated()
    test_prose_mentioning_marker_is_body()
    test_concatenation_reproduces_body_lines()
    test_find_headings()

    print("✅ All tests passed!")


if __name__ == "__main__":
    main()
