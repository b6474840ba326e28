"""CLI 인터페이스

Typer 기반 명령줄 인터페이스, Rich 기반 결과 출력

    txt2book 小说.txt
"""

import typer
from typing import List, Optional
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from txt2book.config.loader import get_config
from txt2book.stages.converter import BookConverter
from txt2book.stages.renderer import RenderResult
from txt2book.utils.logger import get_logger, set_levels, set_log_dir

logger = get_logger(__name__)
console = Console()
app = typer.Typer(help="txt2book - 중국어 소설 TXT를 PDF/MOBI/EPUB으로 변환", add_completion=False)

USAGE = "  USAGE: txt2book filename.txt"


def print_report(results: List[RenderResult]) -> None:
    """렌더러별 결과 테이블 출력"""
    table = Table(title="렌더링 결과")
    table.add_column("포맷", style="cyan")
    table.add_column("종료 코드", style="yellow")
    table.add_column("상태")
    table.add_column("소요 시간", style="magenta")
    table.add_column("출력 파일", style="green")

    for result in results:
        status = "[green]성공[/green]" if result.succeeded else "[red]실패[/red]"
        table.add_row(
            result.format,
            str(result.returncode),
            status,
            f"{result.duration:.1f}s",
            escape(result.output_path)
        )

    console.print(table)


@app.command()
def convert(
    file: Optional[str] = typer.Argument(None, metavar="FILENAME", help="변환할 TXT 파일")
):
    """TXT 파일을 챕터별로 나누고 모든 포맷으로 렌더링"""
    if not file:
        typer.echo(USAGE, err=True)
        raise typer.Exit(1)

    config = get_config()
    set_log_dir(config.paths.logs)
    set_levels(config.logging.file_level, config.logging.console_level)

    console.print(Panel.fit(f"📖 {escape(file)}", style="bold blue"))

    converter = BookConverter(config)
    results = converter.convert(file)

    print_report(results)

    failed = [r for r in results if not r.succeeded]
    if failed:
        console.print(f"\n❌ 실패한 포맷: [red]{', '.join(r.format for r in failed)}[/red]")
        raise typer.Exit(1)

    console.print("\n[bold green]🎉 변환 완료![/bold green]")


def main() -> None:
    app(prog_name="txt2book")


if __name__ == "__main__":
    main()
