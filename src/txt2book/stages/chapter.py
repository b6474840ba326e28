"""챕터 데이터 구조

소설의 챕터와 책 프로젝트를 나타내는 데이터 클래스
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

PREFACE_TITLE = "Preface"
PREFACE_FILENAME = "README.md"


@dataclass(frozen=True)
class ChapterKey:
    """챕터 식별자: 서문(Preface) 또는 제목 줄(Titled)

    heading이 None이면 서문, 아니면 원문 제목 줄 그대로.
    """
    heading: Optional[str] = None

    PREFACE: ClassVar["ChapterKey"]

    @classmethod
    def titled(cls, heading: str) -> "ChapterKey":
        return cls(heading=heading)

    @property
    def is_preface(self) -> bool:
        return self.heading is None


ChapterKey.PREFACE = ChapterKey()


@dataclass(frozen=True)
class Chapter:
    """소설의 한 챕터

    Attributes:
        key: 챕터 식별자
        lines: 본문 줄 (제목 줄 제외)
    """
    key: ChapterKey
    lines: Tuple[str, ...] = ()

    @property
    def is_preface(self) -> bool:
        return self.key.is_preface

    @property
    def heading(self) -> Optional[str]:
        return self.key.heading

    @property
    def display_title(self) -> str:
        """목차 표시용 제목"""
        return PREFACE_TITLE if self.is_preface else self.key.heading

    def __repr__(self):
        return f"<Chapter {self.display_title!r} ({len(self.lines)} lines)>"


@dataclass(frozen=True)
class BookProject:
    """책 프로젝트: 제목 + 챕터 목록 (첫 번째는 항상 서문)"""
    title: str
    chapters: Tuple[Chapter, ...]

    def __post_init__(self):
        if not self.chapters or not self.chapters[0].is_preface:
            raise ValueError("BookProject must start with the preface chapter")
        if any(ch.is_preface for ch in self.chapters[1:]):
            raise ValueError("BookProject may contain only one preface chapter")

    @staticmethod
    def filename_for(index: int) -> str:
        """챕터 순번 → 파일명 (0번은 서문)

        10자리 0 채움으로 사전순 정렬 = 등장 순서 보장
        """
        if index == 0:
            return PREFACE_FILENAME
        return f"part-{index:010d}.md"

    def entries(self):
        """(파일명, 챕터) 순서대로 반환"""
        for index, chapter in enumerate(self.chapters):
            yield self.filename_for(index), chapter
