"""TXT → 책 변환 파이프라인

읽기 → 챕터 분할 → GitBook 프로젝트 기록(임시 디렉토리) → 렌더러 실행
임시 디렉토리는 렌더러 실패나 예외와 관계없이 항상 삭제된다.
"""

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional
from txt2book.config.loader import Config, get_config
from txt2book.stages.chapter import BookProject
from txt2book.stages.project_writer import BookProjectWriter
from txt2book.stages.reader import TxtReader, book_title
from txt2book.stages.renderer import RenderPool, RenderResult
from txt2book.stages.segmenter import ChapterSegmenter
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

# 임시 디렉토리 내부 구조
PROJECT_DIRNAME = "book"
BUILD_DIRNAME = "build"


class BookConverter:
    """TXT 파일을 PDF/MOBI/EPUB으로 변환"""

    def __init__(self, config: Optional[Config] = None):
        """
        Args:
            config: 설정 (None이면 전역 설정)
        """
        self.config = config or get_config()
        self.reader = TxtReader(
            auto_detect_encoding=self.config.reading.auto_detect_encoding,
            default_encoding=self.config.reading.default_encoding
        )
        self.segmenter = ChapterSegmenter()
        self.writer = BookProjectWriter()
        self.pool = RenderPool(self.config.renderer)

    def load(self, file_path: str) -> BookProject:
        """파일을 읽어 BookProject 생성"""
        lines = self.reader.read_lines(file_path)
        chapters = self.segmenter.split_lines(lines)

        for heading in self.segmenter.find_headings(lines):
            logger.debug(f"  heading line {heading['line_num'] + 1}: {heading['text']}")

        return BookProject(title=book_title(file_path), chapters=tuple(chapters))

    @contextmanager
    def project_source(self, project: BookProject) -> Iterator[Path]:
        """프로젝트를 임시 디렉토리에 기록하고 그 경로를 제공

        with 블록을 벗어나면 (예외 포함) 디렉토리 전체를 삭제
        """
        with tempfile.TemporaryDirectory(prefix="txt2book-") as tmpdir:
            root = Path(tmpdir)
            source_dir = root / PROJECT_DIRNAME
            source_dir.mkdir()
            self.writer.write(project, str(source_dir))
            logger.debug(f"Project source ready: {source_dir}")
            yield source_dir
        logger.debug(f"Removed temporary directory: {tmpdir}")

    def render(self, project: BookProject, output_dir: Optional[str] = None) -> List[RenderResult]:
        """BookProject를 설정된 모든 포맷으로 렌더링

        Args:
            project: BookProject
            output_dir: 결과 저장 디렉토리 (None이면 설정값)

        Returns:
            RenderResult 목록
        """
        output_root = Path(output_dir or self.config.paths.output_folder).resolve()
        output_root.mkdir(parents=True, exist_ok=True)

        with self.project_source(project) as source_dir:
            jobs = self.pool.build_jobs(
                project.title,
                str(source_dir),
                str(output_root),
                work_dir=str(source_dir.parent / BUILD_DIRNAME)
            )
            return self.pool.run(jobs)

    def convert(self, file_path: str, output_dir: Optional[str] = None) -> List[RenderResult]:
        """TXT 파일 변환 (읽기 실패 시 예외가 그대로 전달됨)"""
        logger.info("=" * 50)
        logger.info(f"Converting: {file_path}")
        logger.info("=" * 50)

        project = self.load(file_path)
        logger.info(f"Book: {project.title} ({len(project.chapters) - 1} chapters)")
        return self.render(project, output_dir)
