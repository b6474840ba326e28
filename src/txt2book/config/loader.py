"""설정 파일 로더 (YAML)

config.yml을 읽어서 Python 객체로 변환
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yml"

# 지원하는 출력 포맷
SUPPORTED_FORMATS = ("pdf", "mobi", "epub")


@dataclass
class PathsConfig:
    """경로 설정"""
    output_folder: str = "."
    logs: str = "data/logs"


@dataclass
class ReadingConfig:
    """입력 텍스트 읽기 옵션"""
    auto_detect_encoding: bool = True
    default_encoding: str = "utf-8"


@dataclass
class KindlegenConfig:
    """EPUB → kindlegen MOBI 체인 설정"""
    enabled: bool = False
    command: List[str] = field(
        default_factory=lambda: ["kindlegen", "{input}", "-c2", "-o", "{output_name}"]
    )


@dataclass
class RendererConfig:
    """외부 렌더러 설정

    command/commands 템플릿 치환자: {format}, {source}, {output}, {title}, {python}
    """
    command: List[str] = field(
        default_factory=lambda: ["gitbook", "{format}", "{source}", "{output}"]
    )
    formats: List[str] = field(default_factory=lambda: list(SUPPORTED_FORMATS))
    commands: Dict[str, List[str]] = field(default_factory=dict)
    kindlegen: KindlegenConfig = field(default_factory=KindlegenConfig)

    def command_for(self, fmt: str) -> List[str]:
        """포맷별 명령 템플릿 (개별 설정이 없으면 공용 템플릿)"""
        return list(self.commands.get(fmt, self.command))


@dataclass
class LoggingConfig:
    """로깅 설정"""
    file_level: str = "DEBUG"
    console_level: str = "INFO"


@dataclass
class Config:
    """전체 설정"""
    paths: PathsConfig = field(default_factory=PathsConfig)
    reading: ReadingConfig = field(default_factory=ReadingConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _validate_formats(renderer: RendererConfig) -> None:
    """포맷 이름 검증

    Raises:
        ValueError: 지원하지 않는 포맷이 있을 때
    """
    for fmt in list(renderer.formats) + list(renderer.commands):
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {fmt} (expected one of {', '.join(SUPPORTED_FORMATS)})")


def parse_config(data: Optional[Dict[str, Any]]) -> Config:
    """dict → Config 변환 (누락된 항목은 기본값)

    Args:
        data: yaml.safe_load 결과

    Returns:
        Config 객체
    """
    data = data or {}
    renderer_data = dict(data.get("renderer") or {})
    kindlegen_data = renderer_data.pop("kindlegen", None) or {}

    config = Config(
        paths=PathsConfig(**(data.get("paths") or {})),
        reading=ReadingConfig(**(data.get("reading") or {})),
        renderer=RendererConfig(
            kindlegen=KindlegenConfig(**kindlegen_data),
            **renderer_data
        ),
        logging=LoggingConfig(**(data.get("logging") or {}))
    )
    _validate_formats(config.renderer)
    return config


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """config.yml 로드

    Args:
        config_path: 설정 파일 경로

    Returns:
        Config 객체

    Raises:
        FileNotFoundError: 설정 파일이 없을 때
        yaml.YAMLError: YAML 파싱 에러
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    config = parse_config(data)
    logger.debug(f"Config loaded: formats={config.renderer.formats}")
    return config


# 전역 설정 인스턴스 (싱글톤)
_config: Optional[Config] = None


def get_config() -> Config:
    """전역 설정 인스턴스 반환 (싱글톤)

    기본 경로에 config.yml이 없으면 내장 기본값을 사용한다.

    Example:
        >>> from txt2book.config.loader import get_config
        >>> config = get_config()
        >>> print(config.renderer.formats)
    """
    global _config
    if _config is None:
        if Path(DEFAULT_CONFIG_PATH).exists():
            _config = load_config(DEFAULT_CONFIG_PATH)
        else:
            logger.warning(f"{DEFAULT_CONFIG_PATH} not found, using built-in defaults")
            _config = Config()
    return _config


def save_config(config: Config, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """config.yml 저장

    Args:
        config: Config 객체
        config_path: 설정 파일 경로
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    logger.info(f"✅ Config saved: {config_path}")
