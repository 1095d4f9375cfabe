"""IANA 프로토콜 번호 → 소문자 프로토콜 이름 해석기 (실행 단위 캐시 포함)."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterable
from typing import Any

from flowtagger.netflow.models import MAX_PROTOCOL

logger = logging.getLogger("flowtagger.netflow.protocols")

UNKNOWN_PROTOCOL = "unknown"


@functools.lru_cache(maxsize=1)
def default_registry() -> Any:
    """scapy가 시스템 프로토콜 DB에서 읽어 둔 IP_PROTOS 테이블을 반환한다."""
    from scapy.data import IP_PROTOS

    return IP_PROTOS


class ProtocolResolver:
    """프로토콜 번호를 이름으로 해석하고 결과를 캐시한다.

    해석은 번호에 대한 순수 함수이므로, 캐시 미스 경쟁으로 같은 번호를
    두 번 계산해도 결과는 같다. 캐시는 레지스트리 조회 비용만 줄인다.
    registry는 ``registry[number] -> name`` 형태의 조회를 지원하면 되며,
    생략하면 scapy의 IP_PROTOS를 사용한다.
    """

    def __init__(self, registry: Any = None) -> None:
        self._registry = registry
        self._cache: dict[int, str] = {}
        self._lock = threading.Lock()

    def _lookup(self, number: int) -> str:
        registry = self._registry if self._registry is not None else default_registry()
        try:
            name = registry[number]
        except KeyError:
            return UNKNOWN_PROTOCOL
        if not name:
            return UNKNOWN_PROTOCOL
        return str(name).lower()

    def resolve(self, number: int) -> str:
        """프로토콜 번호(0-255)를 소문자 이름으로 변환한다. 미할당 번호는 'unknown'."""
        if not 0 <= number <= MAX_PROTOCOL:
            raise ValueError(f"Protocol number out of range: {number}")

        cached = self._cache.get(number)
        if cached is not None:
            return cached

        name = self._lookup(number)
        with self._lock:
            return self._cache.setdefault(number, name)

    def warm(self, numbers: Iterable[int]) -> None:
        """아직 캐시되지 않은 번호들을 미리 해석해 둔다."""
        for number in numbers:
            if number not in self._cache:
                self.resolve(number)

    def cached(self) -> dict[int, str]:
        """현재 캐시의 복사본."""
        with self._lock:
            return dict(self._cache)

    def __len__(self) -> int:
        return len(self._cache)
