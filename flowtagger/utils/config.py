"""기본값 병합 기능을 갖춘 YAML 설정 로더."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULTS: dict[str, Any] = {
    "processing": {
        "chunk_size":       1000,
        "pool_size":        10,
        "max_wait_seconds": 3600,
    },
    "output": {
        "path": "output.txt",
    },
    "logging": {
        "level":        "INFO",
        "directory":    "data/logs",
        "format":       "text",
        "max_bytes":    10_485_760,
        "backup_count": 5,
    },
}

# 환경변수 → Config 경로 매핑
_ENV_OVERRIDES: list[tuple[str, str, type]] = [
    ("FLOWTAGGER_CHUNK_SIZE", "processing.chunk_size", int),
    ("FLOWTAGGER_POOL_SIZE", "processing.pool_size", int),
    ("FLOWTAGGER_MAX_WAIT_SECONDS", "processing.max_wait_seconds", int),
    ("FLOWTAGGER_OUTPUT_PATH", "output.path", str),
    ("FLOWTAGGER_LOG_LEVEL", "logging.level", str),
    ("FLOWTAGGER_LOG_DIR", "logging.directory", str),
]


class ConfigError(ValueError):
    """설정 값이 유효하지 않음."""


def _deep_merge(base: dict, override: dict) -> dict:
    """override를 base에 재귀적으로 병합하여 새 dict를 반환한다."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """점 표기법을 사용하여 중첩 dict에 값을 설정한다."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _apply_env_overrides(data: dict) -> None:
    """환경변수가 설정되어 있으면 YAML 값을 오버라이드한다."""
    for env_var, config_path, cast in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value is not None:
            try:
                _set_nested(data, config_path, cast(value))
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc


class Config:
    """YAML 파일에서 로드된 불변 설정 컨테이너."""

    def __init__(self, data: dict[str, Any], config_path: str | Path | None = None) -> None:
        self._data = data
        self.config_path: str | None = str(config_path) if config_path else None

    @classmethod
    def defaults(cls) -> Config:
        """내장 기본값만으로 구성된 설정."""
        return cls(copy.deepcopy(DEFAULTS))

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """YAML 파일에서 설정을 로드하고 내장 기본값 위에 병합한다.

        경로를 명시하지 않으면 환경변수 FLOWTAGGER_CONFIG, 그다음
        프로젝트 루트 기준 config/default.yaml을 사용한다. 명시한 경로가
        없으면 FileNotFoundError, 기본 경로가 없으면 내장 기본값을 쓴다.
        .env 파일이 존재하면 자동으로 로드하여 환경변수를 설정한다.
        """
        load_dotenv()

        explicit = config_path is not None
        if config_path is None:
            config_path = os.environ.get("FLOWTAGGER_CONFIG")
            explicit = config_path is not None
        if config_path is None:
            project_root = Path(__file__).resolve().parent.parent.parent
            config_path = project_root / "config" / "default.yaml"

        config_path = Path(config_path)
        data: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            config_path = None

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")
        inner = data.get("flowtagger", data)
        if not isinstance(inner, dict):
            raise ConfigError(f"'flowtagger' section must be a mapping: {config_path}")
        merged = _deep_merge(copy.deepcopy(DEFAULTS), inner)
        _apply_env_overrides(merged)

        return cls(merged, config_path=config_path)

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """점 표기법으로 값을 조회한다: 'processing.chunk_size' -> config['processing']['chunk_size']."""
        keys = dotted_key.split(".")
        current = self._data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def with_overrides(self, overrides: dict[str, Any]) -> Config:
        """점 표기법 키의 값을 덮어쓴 새 Config를 반환한다. None 값은 무시한다."""
        data = copy.deepcopy(self._data)
        for dotted_key, value in overrides.items():
            if value is not None:
                _set_nested(data, dotted_key, value)
        return Config(data, config_path=self.config_path)

    def section(self, key: str) -> dict[str, Any]:
        """주어진 최상위 키에 대한 하위 dict를 반환한다."""
        return self._data.get(key, {})

    @property
    def raw(self) -> dict[str, Any]:
        """설정 데이터의 원본 dict를 반환한다."""
        return self._data


def _positive_int(section: dict[str, Any], key: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"processing.{key} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class ProcessingSettings:
    """병렬 집계 엔진 설정."""
    chunk_size:       int = 1000
    pool_size:        int = 10
    max_wait_seconds: int = 3600

    @classmethod
    def from_config(cls, config: Config) -> ProcessingSettings:
        """config의 processing 섹션에서 설정을 만든다.

        Raises:
            ConfigError: 값이 양의 정수가 아닌 경우.
        """
        section = config.section("processing")
        return cls(
            chunk_size=_positive_int(section, "chunk_size"),
            pool_size=_positive_int(section, "pool_size"),
            max_wait_seconds=_positive_int(section, "max_wait_seconds"),
        )
