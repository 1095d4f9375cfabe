"""집계 카운터 — 청크 단위 로컬 누적기와 실행 단위 공유 카운터."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field

from flowtagger.netflow.models import SkipReason

logger = logging.getLogger("flowtagger.netflow.counters")


@dataclass
class ChunkTally:
    """한 청크를 처리하는 동안 워커 스레드가 단독으로 쓰는 로컬 누적기."""
    tag_count:           Counter = field(default_factory=Counter)
    port_protocol_count: Counter = field(default_factory=Counter)
    untagged_count:      int     = 0
    skipped:             Counter = field(default_factory=Counter)

    def add_record(self, port_protocol: str, tags: frozenset[str]) -> None:
        """파싱에 성공한 레코드 하나를 반영한다.

        태그가 K개면 태그 카운터 K개가 각각 1씩 증가하고,
        포트/프로토콜 카운터는 태그 결과와 무관하게 정확히 1 증가한다.
        """
        if tags:
            for tag in tags:
                self.tag_count[tag] += 1
        else:
            self.untagged_count += 1
        self.port_protocol_count[port_protocol] += 1

    def add_skip(self, reason: SkipReason) -> None:
        self.skipped[reason] += 1

    @property
    def parsed_records(self) -> int:
        return sum(self.port_protocol_count.values())


@dataclass(frozen=True)
class CountsSnapshot:
    """freeze 시점의 카운터 사본."""
    tag_count:           dict[str, int]
    port_protocol_count: dict[str, int]
    untagged_count:      int
    skipped:             dict[SkipReason, int]


class FlowCounters:
    """한 번의 실행 동안 모든 청크가 병합되는 공유 카운터.

    병합은 락 안에서 한 번에 수행되므로 다른 워커에게 중간 상태가 보이지 않는다.
    freeze() 이후 도착한 병합은 버려진다 (타임아웃 후 보고서 내용 고정).
    """

    def __init__(self) -> None:
        self._lock                = threading.Lock()
        self._tag_count           = Counter()
        self._port_protocol_count = Counter()
        self._untagged_count      = 0
        self._skipped             = Counter()
        self._frozen              = False

    def merge(self, tally: ChunkTally) -> bool:
        """청크 누적 결과를 원자적으로 병합한다. 이미 고정되었으면 False."""
        with self._lock:
            if self._frozen:
                logger.warning(
                    "Dropping late chunk result (%d records) after counters were frozen",
                    tally.parsed_records,
                )
                return False
            self._tag_count.update(tally.tag_count)
            self._port_protocol_count.update(tally.port_protocol_count)
            self._untagged_count += tally.untagged_count
            self._skipped.update(tally.skipped)
            return True

    def freeze(self) -> CountsSnapshot:
        """이후 병합을 막고 현재 상태의 사본을 반환한다."""
        with self._lock:
            self._frozen = True
            return CountsSnapshot(
                tag_count=dict(self._tag_count),
                port_protocol_count=dict(self._port_protocol_count),
                untagged_count=self._untagged_count,
                skipped=dict(self._skipped),
            )


@dataclass(frozen=True)
class AggregationResult:
    """processing 완료 후 보고서 작성에 넘겨지는 최종 집계."""
    tag_count:           dict[str, int]
    port_protocol_count: dict[str, int]
    untagged_count:      int
    skipped:             dict[SkipReason, int] = field(default_factory=dict)
    chunks_submitted:    int  = 0
    chunks_failed:       int  = 0
    chunks_abandoned:    int  = 0
    timed_out:           bool = False

    @classmethod
    def from_snapshot(cls, snapshot: CountsSnapshot, **stats) -> "AggregationResult":
        return cls(
            tag_count=snapshot.tag_count,
            port_protocol_count=snapshot.port_protocol_count,
            untagged_count=snapshot.untagged_count,
            skipped=snapshot.skipped,
            **stats,
        )

    @property
    def parsed_records(self) -> int:
        """성공적으로 파싱된 레코드 수 (포트/프로토콜 카운터 합)."""
        return sum(self.port_protocol_count.values())

    @property
    def skipped_records(self) -> int:
        return sum(self.skipped.values())
