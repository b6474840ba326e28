"""전역 로깅 설정 모듈

모든 모듈에서 `from txt2book.utils.logger import get_logger` 로 사용.
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

# 로그 디렉토리
LOG_DIR = Path("data/logs")

# 로그 포맷
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"


def _log_file(log_dir: Path) -> Path:
    """날짜별 로그 파일 경로"""
    return log_dir / f"{datetime.now().strftime('%Y-%m-%d')}.log"


def _file_handler(log_file: Path, level: str) -> logging.FileHandler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "DEBUG",
    console_level: str = "INFO",
    log_dir: Optional[str] = None
) -> Path:
    """전역 로깅 설정

    Args:
        level: 파일 로그 레벨 (DEBUG/INFO/WARNING/ERROR)
        console_level: 콘솔 로그 레벨 (기본 INFO)
        log_dir: 로그 디렉토리 (None이면 data/logs)

    Returns:
        로그 파일 경로
    """
    directory = Path(log_dir) if log_dir else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_file = _log_file(directory)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # 최소 레벨은 DEBUG

    # 기존 핸들러 제거
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # 파일 핸들러 (DEBUG 레벨까지 전부 기록)
    root_logger.addHandler(_file_handler(log_file, level))

    # 콘솔 핸들러 (INFO 이상만 표시)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    root_logger.debug(f"Logging initialized: file={log_file}, level={level}")
    return log_file


def set_levels(level: str = "DEBUG", console_level: str = "INFO") -> None:
    """이미 설정된 핸들러의 레벨만 변경 (설정 파일 반영용)"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            handler.setLevel(getattr(logging, level.upper()))
        else:
            handler.setLevel(getattr(logging, console_level.upper()))


def set_log_dir(log_dir: str) -> Path:
    """파일 핸들러만 다른 로그 디렉토리로 교체 (설정 파일의 paths.logs 반영용)

    콘솔 핸들러와 파일 로그 레벨은 그대로 유지한다.

    Returns:
        로그 파일 경로
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = _log_file(directory)

    root_logger = logging.getLogger()
    level = "DEBUG"
    for handler in list(root_logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            continue
        if handler.baseFilename == os.path.abspath(log_file):
            return log_file
        level = logging.getLevelName(handler.level)
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_file_handler(log_file, level))
    root_logger.debug(f"Log file: {log_file}")
    return log_file


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """로거 인스턴스 반환

    Args:
        name: 로거 이름 (보통 __name__ 사용)

    Returns:
        logging.Logger 인스턴스

    Example:
        >>> from txt2book.utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("정보 메시지")
    """
    return logging.getLogger(name or __name__)


# 모듈 임포트 시 자동 초기화
setup_logging()
