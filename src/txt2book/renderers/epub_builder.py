"""내장 EPUB 렌더러

GitBook 없이 EPUB을 만들 수 있도록 외부 렌더러와 같은 인터페이스를 제공:

    python -m txt2book.renderers.epub_builder epub <source_dir> <output>

source_dir은 BookProjectWriter가 만든 디렉토리 (book.json, SUMMARY.md, *.md)
EbookLib 기반, Stage 5 EPUB 생성 방식을 따름
"""

import html
import json
import re
import sys
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from ebooklib import epub

from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_ENTRY = re.compile(r"^\* \[(.*)\]\(([^()]+)\)$")

EXIT_UNSUPPORTED_FORMAT = 2


def get_css() -> str:
    """중국어 본문용 CSS"""
    return """body {
    font-family: "Songti SC", "SimSun", "Noto Serif CJK SC", serif;
    margin: 5%;
    line-height: 1.8;
    text-align: justify;
}

h1 {
    font-size: 1.6em;
    font-weight: bold;
    margin-top: 2em;
    margin-bottom: 1em;
    text-align: center;
    page-break-after: avoid;
}

p {
    margin-top: 0.5em;
    margin-bottom: 0.5em;
    text-indent: 2em;
}
"""


def read_summary(source_dir: Path) -> List[Tuple[str, str]]:
    """SUMMARY.md → [(표시 제목, 파일명)]"""
    entries = []
    with open(source_dir / "SUMMARY.md", "r", encoding="utf-8") as f:
        for line in f:
            match = SUMMARY_ENTRY.match(line.rstrip("\n"))
            if match:
                entries.append((match.group(1), match.group(2)))
    return entries


def read_part(path: Path, has_heading: bool = True) -> Tuple[Optional[str], List[str]]:
    """챕터 Markdown → (제목, 문단 목록)

    BookProjectWriter는 줄마다 빈 줄을 붙이므로 빈 줄은 버린다.
    서문(README.md)은 제목 줄이 없으므로 has_heading=False로 읽는다.
    """
    title = None
    paragraphs = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\n")
            if not line:
                continue
            if has_heading and title is None and not paragraphs and line.startswith("# "):
                title = line[2:]
            else:
                paragraphs.append(line)
    return title, paragraphs


def create_chapter_page(title: Optional[str], paragraphs: List[str], file_name: str) -> epub.EpubHtml:
    """챕터 본문 페이지 생성"""
    body_html = ""
    if title:
        body_html += f"<h1>{html.escape(title)}</h1>\n"
    for para in paragraphs:
        body_html += f"<p>{html.escape(para)}</p>\n"

    page = epub.EpubHtml(
        title=title or "",
        file_name=file_name,
        lang="zh"
    )
    page.content = body_html
    page.add_link(href="style/style.css", rel="stylesheet", type="text/css")
    return page


def build_epub(source_dir: str, output_path: str) -> int:
    """GitBook 프로젝트 → EPUB

    Returns:
        생성된 챕터 페이지 수
    """
    root = Path(source_dir)
    with open(root / "book.json", "r", encoding="utf-8") as f:
        manifest = json.load(f)

    book = epub.EpubBook()
    book.set_identifier(f"txt2book-{uuid.uuid4()}")
    book.set_title(manifest["title"])
    book.set_language(manifest.get("language", "zh"))

    css = epub.EpubItem(
        uid="style",
        file_name="style/style.css",
        media_type="text/css",
        content=get_css()
    )
    book.add_item(css)

    pages = []
    toc = []
    for index, (display_title, filename) in enumerate(read_summary(root)):
        # SUMMARY 첫 항목은 서문: 본문 첫 줄이 "# "로 시작해도 제목이 아님
        title, paragraphs = read_part(root / filename, has_heading=index > 0)
        if not title and not paragraphs:
            # 빈 서문 등은 건너뜀
            continue

        page_name = f"chapter_{index:04d}.xhtml"
        page = create_chapter_page(title, paragraphs, page_name)
        book.add_item(page)
        pages.append(page)
        toc.append(epub.Link(page_name, display_title, Path(page_name).stem))

    if not pages:
        raise ValueError(f"No chapters found in {source_dir}")

    book.toc = toc
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav"] + pages

    epub.write_epub(output_path, book, {})
    logger.info(f"✅ EPUB created: {output_path} ({len(pages)} chapters)")
    return len(pages)


app = typer.Typer(help="Built-in EPUB renderer for txt2book projects")


@app.command()
def render(
    fmt: str = typer.Argument(..., metavar="FORMAT", help="출력 포맷 (epub만 지원)"),
    source: str = typer.Argument(..., help="GitBook 프로젝트 디렉토리"),
    output: str = typer.Argument(..., help="출력 파일 경로")
):
    """GitBook 프로젝트를 EPUB으로 렌더링"""
    if fmt != "epub":
        typer.echo(f"Unsupported format: {fmt} (only epub)", err=True)
        raise typer.Exit(EXIT_UNSUPPORTED_FORMAT)

    try:
        build_epub(source, output)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"EPUB rendering failed: {e}")
        raise typer.Exit(1)


def main() -> None:
    app(prog_name="txt2book-epub")


if __name__ == "__main__":
    sys.exit(main())
