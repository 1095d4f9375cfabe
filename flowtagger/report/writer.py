"""집계 결과를 텍스트 보고서로 직렬화한다.

형식::

    Tag Counts:
    <tag>,<count>
    Untagged,<count>

    Port/Protocol Combination Counts:
    <port>,<protocol>,<count>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger("flowtagger.report.writer")

TAG_HEADER           = "Tag Counts:"
UNTAGGED_LABEL       = "Untagged"
PORT_PROTOCOL_HEADER = "Port/Protocol Combination Counts:"


class ReportWriteError(OSError):
    """보고서 파일 쓰기 실패."""


def _by_count(counts: Mapping[str, int]) -> list[tuple[str, int]]:
    # 건수 내림차순, 같으면 키 오름차순
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def render_report(
    tag_count: Mapping[str, int],
    untagged_count: int,
    port_protocol_count: Mapping[str, int],
) -> str:
    """보고서 본문 문자열을 만든다."""
    lines = [TAG_HEADER]
    lines.extend(f"{tag},{count}" for tag, count in _by_count(tag_count))
    lines.append(f"{UNTAGGED_LABEL},{untagged_count}")
    lines.append("")
    lines.append(PORT_PROTOCOL_HEADER)
    lines.extend(f"{key},{count}" for key, count in _by_count(port_protocol_count))
    return "\n".join(lines) + "\n"


def write_report(
    output_path: str | Path,
    tag_count: Mapping[str, int],
    untagged_count: int,
    port_protocol_count: Mapping[str, int],
) -> Path:
    """보고서를 파일에 쓴다. 재시도하지 않는다.

    Raises:
        ReportWriteError: 경로에 쓸 수 없는 경우.
    """
    output_path = Path(output_path)
    content = render_report(tag_count, untagged_count, port_protocol_count)
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as exc:
        raise ReportWriteError(f"Failed to write report to {output_path}: {exc}") from exc

    logger.info(
        "Report written to %s (%d tags, %d port/protocol pairs)",
        output_path, len(tag_count), len(port_protocol_count),
    )
    return output_path
