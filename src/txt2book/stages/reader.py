"""텍스트 파일 리더

TXT 파일을 읽어 줄 단위(RawLine) 목록과 책 제목을 만든다.
인코딩은 chardet으로 감지 (중국어 소설은 GBK/GB18030인 경우가 많음)
"""

import re
import chardet
from pathlib import Path
from typing import List, Optional, Tuple
from txt2book.utils.logger import get_logger

logger = get_logger(__name__)

# 줄 앞 공백 (반각 공백, 탭, 전각 공백)
LEADING_SPACE = re.compile(r"^[ \t　]*")

# 인코딩 감지에 사용할 샘플 크기
SAMPLE_SIZE = 64 * 1024

# 이 값 이하의 신뢰도는 기본 인코딩 다음 순위로 밀림
MIN_CONFIDENCE = 0.7

# 감지가 불확실할 때 시도하는 중국어 인코딩 (GBK/GB2312의 상위 집합)
FALLBACK_ENCODING = "gb18030"


def normalize_encoding(encoding: str) -> str:
    """chardet 판정 이름 → 실제 디코딩에 쓸 코덱 이름"""
    name = encoding.lower()
    # GB2312/GBK 판정은 GB18030으로 확장 (희귀 한자 깨짐 방지)
    if name in ("gb2312", "gbk"):
        return "gb18030"
    # UTF-8 BOM 제거
    if name.replace("-", "").replace("_", "") == "utf8":
        return "utf-8-sig"
    return encoding


def book_title(file_path: str) -> str:
    """파일명에서 확장자를 뺀 책 제목

    Examples:
        >>> book_title("/novels/斗破苍穹.txt")
        '斗破苍穹'
    """
    return Path(file_path).stem


def clean_line(line: str) -> str:
    """앞 공백과 모든 CR/LF 문자를 제거"""
    line = LEADING_SPACE.sub("", line)
    return line.replace("\r", "").replace("\n", "")


def split_lines(text: str) -> List[str]:
    """텍스트를 \\n 기준으로 나누고 정리

    파일 끝의 개행은 빈 줄을 만들지 않는다.
    """
    if not text:
        return []
    raw_lines = text.split("\n")
    if raw_lines[-1] == "":
        raw_lines.pop()
    return [clean_line(line) for line in raw_lines]


class TxtReader:
    """TXT 파일 → RawLine 목록"""

    def __init__(self, auto_detect_encoding: bool = True, default_encoding: str = "utf-8"):
        """
        Args:
            auto_detect_encoding: chardet 인코딩 감지 사용 여부
            default_encoding: 감지 실패 시 사용할 인코딩
        """
        self.auto_detect_encoding = auto_detect_encoding
        self.default_encoding = default_encoding

    def detect_encoding(self, raw: bytes) -> Optional[str]:
        """바이트 샘플로 인코딩 감지

        Returns:
            감지된 인코딩 (신뢰도가 낮으면 None)
        """
        encoding, confidence = self._guess(raw)
        if encoding and confidence > MIN_CONFIDENCE:
            logger.debug(f"Encoding detected: {encoding} ({confidence:.2f})")
            return encoding

        logger.debug(f"Low confidence encoding: {encoding} ({confidence:.2f})")
        return None

    def _guess(self, raw: bytes) -> Tuple[Optional[str], float]:
        if not raw:
            return None, 0.0
        result = chardet.detect(raw[:SAMPLE_SIZE])
        return result.get("encoding"), result.get("confidence") or 0.0

    def candidates(self, raw: bytes) -> List[str]:
        """디코딩을 시도할 인코딩 순서

        확실한 감지 결과 → 기본 인코딩 → GB18030 → 신뢰도 낮은 감지 결과
        """
        confident = None
        weak = None
        if self.auto_detect_encoding:
            encoding, confidence = self._guess(raw)
            if encoding and confidence > MIN_CONFIDENCE:
                confident = encoding
            else:
                weak = encoding
            logger.debug(f"Encoding guess: {encoding} ({confidence:.2f})")

        ordered = []
        for encoding in (confident, self.default_encoding, FALLBACK_ENCODING, weak):
            # 샘플 구간이 ASCII뿐이어도 뒤쪽에 한자가 있을 수 있음
            if not encoding or encoding.lower() == "ascii":
                continue
            encoding = normalize_encoding(encoding)
            if encoding not in ordered:
                ordered.append(encoding)
        return ordered

    def decode(self, raw: bytes) -> str:
        candidates = self.candidates(raw)
        for encoding in candidates:
            try:
                return raw.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Decoding with {encoding} failed")

        logger.warning(f"No encoding fits the input, decoding with {candidates[0]} and replacing bad bytes")
        return raw.decode(candidates[0], errors="replace")

    def read_lines(self, file_path: str) -> List[str]:
        """파일 전체를 읽어 정리된 줄 목록 반환

        Raises:
            FileNotFoundError: 파일이 없을 때
            OSError: 읽기 실패
        """
        path = Path(file_path)
        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read file: {file_path} - {e}")
            raise

        lines = split_lines(self.decode(raw))
        logger.info(f"Read {len(lines)} lines from {path.name}")
        return lines
