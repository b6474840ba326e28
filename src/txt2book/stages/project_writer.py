"""GitBook 프로젝트 생성

book.json, 챕터별 Markdown, SUMMARY.md(목차)를 대상 디렉토리에 기록
"""

import json
from pathlib import Path
from typing import List
from txt2book.stages.chapter import BookProject, Chapter
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

MANIFEST_FILENAME = "book.json"
SUMMARY_FILENAME = "SUMMARY.md"
LANGUAGE = "zh"


def markdown_lines(chapter: Chapter) -> List[str]:
    """챕터 → Markdown 줄 목록 (제목이 있으면 '# 제목'이 맨 앞)"""
    md_lines = []
    if chapter.heading:
        md_lines.append(f"# {chapter.heading}")
    return md_lines + list(chapter.lines)


class BookProjectWriter:
    """BookProject를 GitBook 디렉토리 구조로 기록"""

    def write(self, project: BookProject, destination: str) -> None:
        """프로젝트 전체 기록

        Args:
            project: BookProject
            destination: 대상 디렉토리 (이미 존재해야 함)

        Raises:
            OSError: 파일 생성 실패
        """
        root = Path(destination)
        self.write_metadata(project, root)
        self.write_parts(project, root)
        self.write_summary(project, root)
        logger.info(f"Book project written: {root} ({len(project.chapters)} files)")

    def write_metadata(self, project: BookProject, root: Path) -> None:
        manifest = {"title": project.title, "language": LANGUAGE}
        with open(root / MANIFEST_FILENAME, "w", encoding="utf-8") as f:
            json.dump(manifest, f, ensure_ascii=False)

    def write_parts(self, project: BookProject, root: Path) -> None:
        # 줄마다 빈 줄을 붙여 렌더러가 각 줄을 별도 문단으로 처리하게 함
        for filename, chapter in project.entries():
            with open(root / filename, "w", encoding="utf-8") as f:
                for md_line in markdown_lines(chapter):
                    f.write(f"{md_line}\n\n")
            logger.debug(f"created {filename}: {chapter.display_title}")

    def write_summary(self, project: BookProject, root: Path) -> None:
        with open(root / SUMMARY_FILENAME, "w", encoding="utf-8") as f:
            for filename, chapter in project.entries():
                f.write(f"* [{chapter.display_title}]({filename})\n")
