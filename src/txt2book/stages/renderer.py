"""외부 렌더러 실행

포맷(pdf/mobi/epub)마다 렌더러 프로세스를 하나씩 동시에 띄우고 모두 끝날 때까지 기다린다.
한 렌더러가 실패해도 나머지는 계속 진행되며, 결과는 RenderResult 목록으로 수집한다.
"""

import re
import shutil
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from txt2book.config.loader import RendererConfig
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

# 실행 파일을 찾지 못했을 때 기록하는 종료 코드 (셸 관례)
EXIT_NOT_FOUND = 127


# 명령 템플릿 치환자 {name}
PLACEHOLDER = re.compile(r"\{(\w+)\}")


def expand_command(template: List[str], values: Dict[str, str]) -> List[str]:
    """명령 템플릿의 {name} 치환자를 값으로 바꿈

    한 번에 치환하므로 값 안의 {name}은 다시 치환되지 않고,
    모르는 이름과 다른 중괄호는 그대로 둔다.
    """
    return [
        PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), arg)
        for arg in template
    ]


@dataclass
class RenderJob:
    """한 포맷의 렌더링 작업

    Attributes:
        format: 출력 포맷 이름
        commands: 순서대로 실행할 명령들 (kindlegen 체인은 2개)
        output_path: 최종 결과 파일
        artifact_path: 마지막 명령이 실제로 만드는 파일 (다르면 output_path로 이동)
    """
    format: str
    commands: List[List[str]]
    output_path: Path
    artifact_path: Optional[Path] = None


@dataclass
class RenderResult:
    """렌더링 결과"""
    format: str
    output_path: str
    returncode: int
    command: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 and Path(self.output_path).exists()


class RenderPool:
    """렌더러 프로세스 fan-out / join"""

    def __init__(self, config: RendererConfig):
        """
        Args:
            config: 렌더러 설정
        """
        self.config = config

    def build_jobs(
        self,
        title: str,
        source_dir: str,
        output_dir: str,
        work_dir: Optional[str] = None
    ) -> List[RenderJob]:
        """설정된 포맷별 작업 생성

        Args:
            title: 책 제목 (출력 파일명)
            source_dir: 생성된 GitBook 프로젝트 디렉토리
            output_dir: 결과 저장 디렉토리
            work_dir: kindlegen 체인용 임시 디렉토리

        Returns:
            RenderJob 목록 (설정 순서)
        """
        output_root = Path(output_dir)
        jobs = []

        for fmt in self.config.formats:
            if fmt == "mobi" and self.config.kindlegen.enabled:
                jobs.append(self._kindlegen_job(title, source_dir, output_root, work_dir))
                continue

            output_path = output_root / f"{title}.{fmt}"
            values = self._values(fmt, title, source_dir, output_path)
            jobs.append(RenderJob(
                format=fmt,
                commands=[expand_command(self.config.command_for(fmt), values)],
                output_path=output_path
            ))

        return jobs

    def _values(self, fmt: str, title: str, source_dir: str, output_path: Path) -> Dict[str, str]:
        return {
            "format": fmt,
            "source": str(source_dir),
            "output": str(output_path),
            "title": title,
            "python": sys.executable,
        }

    def _kindlegen_job(
        self,
        title: str,
        source_dir: str,
        output_root: Path,
        work_dir: Optional[str]
    ) -> RenderJob:
        """EPUB 렌더링 → kindlegen 변환 체인

        kindlegen은 입력 EPUB과 같은 폴더에 결과를 쓰므로
        EPUB을 work_dir에 만들고 결과만 output_root로 옮긴다.
        """
        if work_dir is None:
            raise ValueError("kindlegen chain requires a work directory")

        build_dir = Path(work_dir)
        build_dir.mkdir(parents=True, exist_ok=True)

        epub_path = build_dir / f"{title}.epub"
        output_name = f"{title}.kindlegen.mobi"

        epub_values = self._values("epub", title, source_dir, epub_path)
        kindlegen_values = dict(epub_values, input=str(epub_path), output_name=output_name)

        return RenderJob(
            format="mobi",
            commands=[
                expand_command(self.config.command_for("epub"), epub_values),
                expand_command(self.config.kindlegen.command, kindlegen_values),
            ],
            output_path=output_root / output_name,
            artifact_path=build_dir / output_name
        )

    def _run_command(self, command: List[str]) -> int:
        try:
            completed = subprocess.run(command)
        except OSError as e:
            logger.error(f"Failed to start renderer {command[0]}: {e}")
            return EXIT_NOT_FOUND
        return completed.returncode

    def run_job(self, job: RenderJob) -> RenderResult:
        """작업 하나 실행 (체인이면 실패 시 중단)

        이전 실행이 남긴 결과 파일은 먼저 지워서 이번 실행 결과만 성공으로 판정한다.
        """
        if job.output_path.exists():
            logger.debug(f"[{job.format}] Removing previous output: {job.output_path}")
            job.output_path.unlink()

        started = time.monotonic()
        returncode = 0
        last_command: List[str] = []

        for command in job.commands:
            last_command = command
            logger.info(f"[{job.format}] $ {' '.join(command)}")
            returncode = self._run_command(command)
            if returncode != 0:
                break

        # kindlegen은 경고만 있어도 1로 끝나지만 결과물은 만들어짐
        if job.artifact_path and job.artifact_path.exists():
            shutil.move(str(job.artifact_path), str(job.output_path))

        duration = time.monotonic() - started
        result = RenderResult(
            format=job.format,
            output_path=str(job.output_path),
            returncode=returncode,
            command=last_command,
            duration=duration
        )

        if result.succeeded:
            logger.info(f"✅ [{job.format}] {job.output_path} ({duration:.1f}s)")
        else:
            logger.error(f"❌ [{job.format}] exit={returncode} ({duration:.1f}s)")
        return result

    def run(self, jobs: List[RenderJob]) -> List[RenderResult]:
        """모든 작업을 동시에 실행하고 전부 끝날 때까지 대기

        Returns:
            작업 순서대로의 RenderResult 목록
        """
        if not jobs:
            logger.warning("No render jobs configured")
            return []

        logger.info(f"Starting {len(jobs)} renderers: {', '.join(job.format for job in jobs)}")
        with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
            results = list(executor.map(self.run_job, jobs))

        failed = [r.format for r in results if not r.succeeded]
        logger.info(f"Renderers finished: {len(results) - len(failed)} ok, {len(failed)} failed")
        return results
