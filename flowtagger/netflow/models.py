"""플로우 로그 정규화 모델 — FlowRecord, SkipReason."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# version, account-id, interface-id, srcaddr, dstaddr, srcport, dstport,
# protocol, packets, bytes, start, end, action (log-status는 선택)
MIN_FIELD_COUNT = 13

DST_PORT_INDEX = 6
PROTOCOL_INDEX = 7

MAX_PORT     = 65535
MAX_PROTOCOL = 255


class SkipReason(str, enum.Enum):
    """로그 라인이 집계에서 제외된 이유."""
    TOO_FEW_FIELDS   = "too_few_fields"
    INVALID_PORT     = "invalid_port"
    INVALID_PROTOCOL = "invalid_protocol"


@dataclass(frozen=True)
class FlowRecord:
    """플로우 로그 한 줄에서 집계에 필요한 필드만 추린 표현.

    파싱 직후 카운터에 반영되고 버려진다. 저장하지 않는다.
    """
    dst_port:        int
    protocol_number: int


def port_protocol_key(port: int, protocol: str) -> str:
    """포트/프로토콜 조합 카운터의 키: '25,tcp'."""
    return f"{port},{protocol}"
