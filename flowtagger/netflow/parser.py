"""공백 구분 플로우 로그 라인 파서.

필드 순서: version account-id interface-id srcaddr dstaddr srcport dstport
protocol packets bytes start end action [log-status]
집계에는 dstport(6)와 protocol(7)만 사용하고, 나머지는 필드 개수 검증에만 쓰인다.
"""

from __future__ import annotations

from flowtagger.netflow.models import (
    DST_PORT_INDEX,
    MAX_PORT,
    MAX_PROTOCOL,
    MIN_FIELD_COUNT,
    PROTOCOL_INDEX,
    FlowRecord,
    SkipReason,
)


class ParseError(ValueError):
    """플로우 로그 라인 파싱 실패. reason으로 제외 사유를 구분한다."""

    def __init__(self, reason: SkipReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def _parse_bounded_int(value: str, upper: int) -> int | None:
    try:
        number = int(value)
    except ValueError:
        return None
    if 0 <= number <= upper:
        return number
    return None


def parse_flow_line(line: str) -> FlowRecord:
    """플로우 로그 한 줄을 파싱하여 FlowRecord를 반환한다.

    Args:
        line: 로그 파일의 한 줄 (개행 포함 가능).

    Returns:
        목적지 포트와 프로토콜 번호를 담은 FlowRecord.

    Raises:
        ParseError: 필드 수가 부족하거나 포트/프로토콜이 정수 범위를 벗어난 경우.
    """
    fields = line.split()
    if len(fields) < MIN_FIELD_COUNT:
        raise ParseError(
            SkipReason.TOO_FEW_FIELDS,
            f"Expected at least {MIN_FIELD_COUNT} fields, got {len(fields)}",
        )

    dst_port = _parse_bounded_int(fields[DST_PORT_INDEX], MAX_PORT)
    if dst_port is None:
        raise ParseError(
            SkipReason.INVALID_PORT,
            f"Invalid destination port: {fields[DST_PORT_INDEX]!r}",
        )

    protocol_number = _parse_bounded_int(fields[PROTOCOL_INDEX], MAX_PROTOCOL)
    if protocol_number is None:
        raise ParseError(
            SkipReason.INVALID_PROTOCOL,
            f"Invalid protocol number: {fields[PROTOCOL_INDEX]!r}",
        )

    return FlowRecord(dst_port=dst_port, protocol_number=protocol_number)
