"""입력 파일 존재/읽기 가능 여부 검사."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger("flowtagger.utils.validation")


def validate_readable(path: str | Path) -> bool:
    """경로가 읽을 수 있는 일반 파일이면 True. 아니면 이유를 로그로 남기고 False."""
    path = Path(path)
    if not path.exists():
        logger.error("File does not exist: %s", path)
        return False
    if not path.is_file():
        logger.error("Not a regular file: %s", path)
        return False
    if not os.access(path, os.R_OK):
        logger.error("Cannot read file: %s", path)
        return False
    return True
