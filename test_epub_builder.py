"""내장 EPUB 렌더러 테스트

BookProjectWriter 결과물 → EbookLib EPUB 생성 검증
"""

import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ebooklib import epub
from typer.testing import CliRunner

from txt2book.renderers.epub_builder import app, build_epub, read_part, read_summary
from txt2book.stages.chapter import BookProject
from txt2book.stages.project_writer import BookProjectWriter
from txt2book.stages.segmenter import segment

runner = CliRunner()


def _write_project(directory: str, lines) -> None:
    project = BookProject(title="测试小说", chapters=tuple(segment(lines)))
    BookProjectWriter().write(project, directory)


def test_read_summary_and_parts():
    with tempfile.TemporaryDirectory() as tmpdir:
        _write_project(tmpdir, ["前言内容", "第一章 开端", "主角登场", "", "第二章 冲突"])
        root = Path(tmpdir)

        assert read_summary(root) == [
            ("Preface", "README.md"),
            ("第一章 开端", "part-0000000001.md"),
            ("第二章 冲突", "part-0000000002.md"),
        ]
        assert read_part(root / "README.md", has_heading=False) == (None, ["前言内容"])
        assert read_part(root / "part-0000000001.md") == ("第一章 开端", ["主角登场"])
        assert read_part(root / "part-0000000002.md") == ("第二章 冲突", [])


def test_build_epub():
    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "book"
        source.mkdir()
        # 빈 서문은 건너뜀
        _write_project(str(source), ["第一章 开端", "主角登场 <逃跑>", "第二章 冲突", "情节展开"])

        output = str(Path(tmpdir) / "测试小说.epub")
        assert build_epub(str(source), output) == 2

        book = epub.read_epub(output)
        assert book.get_metadata("DC", "title")[0][0] == "测试小说"
        assert book.get_metadata("DC", "language")[0][0] == "zh"

        docs = [item for item in book.get_items() if item.get_name().startswith("chapter_")]
        assert len(docs) == 2
        content = b"".join(item.get_content() for item in docs).decode("utf-8")
        assert "第一章 开端" in content
        assert "主角登场 &lt;逃跑&gt;" in content


def test_preface_line_starting_with_hash_is_body():
    """서문 첫 줄이 "# "로 시작해도 제목이 아니라 본문"""
    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "book"
        source.mkdir()
        _write_project(str(source), ["# 不是标题", "前言内容", "第一章 开端", "主角登场"])

        assert read_part(source / "README.md", has_heading=False) == (None, ["# 不是标题", "前言内容"])

        output = str(Path(tmpdir) / "测试小说.epub")
        assert build_epub(str(source), output) == 2

        book = epub.read_epub(output)
        preface = book.get_item_with_href("chapter_0000.xhtml").get_content().decode("utf-8")
        assert "<p># 不是标题</p>" in preface
        assert "<h1>" not in preface


def test_cli_renders_epub():
    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "book"
        source.mkdir()
        _write_project(str(source), ["前言内容", "第一章 开端", "主角登场"])
        output = Path(tmpdir) / "out.epub"

        result = runner.invoke(app, ["epub", str(source), str(output)])
        assert result.exit_code == 0
        assert output.exists()


def test_cli_rejects_other_formats():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = runner.invoke(app, ["pdf", tmpdir, str(Path(tmpdir) / "out.pdf")])
        assert result.exit_code == 2
        assert not (Path(tmpdir) / "out.pdf").exists()


def test_cli_missing_project():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = runner.invoke(app, ["epub", str(Path(tmpdir) / "missing"), str(Path(tmpdir) / "out.epub")])
        assert result.exit_code == 1


def main():
    """테스트 실행"""
    print("=" * 50)
    print("EPUB Builder Tests")
    print("=" * 50)

    test_read_summary_and_parts()
    test_build_epub()
    test_preface_line_starting_with_hash_is_body()
    test_cli_renders_epub()
    test_cli_rejects_other_formats()

    print("✅ All tests passed!")


if __name__ == "__main__":
    main()
