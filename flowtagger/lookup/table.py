"""포트/프로토콜 → 태그 집합 룩업 테이블.

파일 형식: 한 줄에 ``port,protocol,tag`` (헤더 없음).
프로토콜은 대소문자를 구분하지 않고 (소문자로 저장), 태그는 원래 대소문자를 유지한다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("flowtagger.lookup.table")

DELIMITER = ","

_EMPTY: frozenset[str] = frozenset()


class LookupLoadError(OSError):
    """룩업 파일을 열거나 읽을 수 없음."""


@dataclass(frozen=True)
class LookupEntry:
    port:     int
    protocol: str
    tags:     frozenset[str]


def _parse_row(line: str) -> tuple[int, str, str] | None:
    """룩업 파일 한 줄을 (port, protocol, tag)로 파싱한다. 잘못된 줄이면 None."""
    parts = line.split(DELIMITER)
    if len(parts) != 3:
        return None

    port_str, protocol, tag = (p.strip() for p in parts)
    try:
        port = int(port_str)
    except ValueError:
        return None
    if port < 0 or not protocol or not tag:
        return None

    return port, protocol.lower(), tag


class LookupTable:
    """실행 시작 전에 한 번 구축되고 이후 읽기 전용으로만 쓰이는 룩업 테이블.

    구축 후에는 변경되지 않으므로 여러 워커가 락 없이 동시에 조회해도 된다.
    """

    def __init__(self, table: dict[int, dict[str, frozenset[str]]] | None = None) -> None:
        self._table: dict[int, dict[str, frozenset[str]]] = {
            port: dict(protocols) for port, protocols in (table or {}).items()
        }

    @classmethod
    def load(cls, path: str | Path) -> LookupTable:
        """룩업 파일에서 테이블을 구축한다.

        필드가 정확히 3개가 아니거나 포트가 음이 아닌 정수가 아닌 줄은 건너뛴다.
        UTF-8로 디코딩할 수 없는 바이트는 U+FFFD로 바뀌어 해당 줄만 영향을 받는다.

        Raises:
            LookupLoadError: 파일을 열거나 읽을 수 없는 경우.
        """
        building: dict[int, dict[str, set[str]]] = {}
        skipped = 0

        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for lineno, raw in enumerate(f, start=1):
                    line = raw.rstrip("\r\n")
                    if not line.strip():
                        continue
                    row = _parse_row(line)
                    if row is None:
                        skipped += 1
                        logger.debug("Skipping malformed lookup row %d: %r", lineno, line)
                        continue
                    port, protocol, tag = row
                    building.setdefault(port, {}).setdefault(protocol, set()).add(tag)
        except OSError as exc:
            raise LookupLoadError(f"Failed to load lookup file {path}: {exc}") from exc

        table = cls({
            port: {protocol: frozenset(tags) for protocol, tags in protocols.items()}
            for port, protocols in building.items()
        })
        logger.info(
            "Loaded lookup table from %s: %d entries, %d rows skipped",
            path, len(table), skipped,
        )
        return table

    def resolve_tags(self, port: int, protocol: str) -> frozenset[str]:
        """(포트, 프로토콜)에 해당하는 태그 집합. 없으면 빈 집합."""
        protocols = self._table.get(port)
        if protocols is None:
            return _EMPTY
        return protocols.get(protocol.lower(), _EMPTY)

    def entries(self) -> Iterator[LookupEntry]:
        for port, protocols in self._table.items():
            for protocol, tags in protocols.items():
                yield LookupEntry(port=port, protocol=protocol, tags=tags)

    def __len__(self) -> int:
        return sum(len(protocols) for protocols in self._table.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LookupTable):
            return NotImplemented
        return self._table == other._table

    def __repr__(self) -> str:
        return f"<LookupTable ports={len(self._table)} entries={len(self)}>"
