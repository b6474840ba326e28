"""Chapter Segmenter

Regex pattern-based splitter for Chinese chapter headings such as
"第三章 开端", "第十二节" or "第一部".
A line counts as a heading only when the text before the marker is short and
the marker itself is short, so prose that merely mentions "第...章" stays body text.
"""

import re
from typing import Any, Dict, List, Optional, Sequence
from txt2book.stages.chapter import Chapter, ChapterKey
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)


class ChapterSegmenter:
    """줄 목록을 서문 + 제목 챕터들로 분할

    Heading rule:
    - group 1 (prefix): everything before "第", must be < MAX_PREFIX_LENGTH chars
    - group 2 (marker): "第" + Chinese numerals + ... + 章/节/部, must be < MAX_MARKER_LENGTH chars
    - group 3 (tail): not gated
    """

    HEADING_PATTERN = re.compile(r"^(.*?)(第[一二三四五六七八九十百千万]+.*[章节部])(.*)$")

    MAX_PREFIX_LENGTH = 5
    MAX_MARKER_LENGTH = 12

    def match_heading(self, line: str) -> Optional[re.Match]:
        """제목 줄이면 match 객체, 아니면 None"""
        match = self.HEADING_PATTERN.match(line)
        if not match:
            return None
        if len(match.group(1)) >= self.MAX_PREFIX_LENGTH:
            return None
        if len(match.group(2)) >= self.MAX_MARKER_LENGTH:
            return None
        return match

    def is_heading(self, line: str) -> bool:
        return self.match_heading(line) is not None

    def split_lines(self, lines: Sequence[str]) -> List[Chapter]:
        """줄 목록을 챕터 목록으로 분할

        Args:
            lines: 정리된 RawLine 목록 (입력 순서)

        Returns:
            챕터 목록. 첫 번째는 항상 서문 (비어 있을 수 있음)
        """
        chapters: List[Chapter] = []
        current_key = ChapterKey.PREFACE
        current_lines: List[str] = []

        for line in lines:
            if self.is_heading(line):
                # 어떤 챕터가 열려 있든 제목 줄은 항상 새 챕터를 시작
                chapters.append(Chapter(current_key, tuple(current_lines)))
                current_key = ChapterKey.titled(line)
                current_lines = []
            else:
                current_lines.append(line)

        # 마지막 챕터 처리
        chapters.append(Chapter(current_key, tuple(current_lines)))

        logger.info(f"Segmented {len(lines)} lines into preface + {len(chapters) - 1} chapters")
        return chapters

    def find_headings(self, lines: Sequence[str]) -> List[Dict[str, Any]]:
        """제목 줄 위치 목록 [{'line_num': int, 'text': str}]"""
        return [
            {"line_num": line_num, "text": line}
            for line_num, line in enumerate(lines)
            if self.is_heading(line)
        ]


def segment(lines: Sequence[str]) -> List[Chapter]:
    """ChapterSegmenter().split_lines 단축 함수"""
    return ChapterSegmenter().split_lines(lines)
