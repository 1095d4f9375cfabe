"""FlowLogProcessor — 플로우 로그를 청크로 나누어 스레드 풀에서 병렬 집계한다."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import TYPE_CHECKING

from flowtagger.lookup.table import LookupTable
from flowtagger.netflow.counters import AggregationResult, ChunkTally, FlowCounters
from flowtagger.netflow.models import port_protocol_key
from flowtagger.netflow.parser import ParseError, parse_flow_line
from flowtagger.netflow.partitioner import read_chunks
from flowtagger.netflow.protocols import ProtocolResolver
from flowtagger.report.writer import write_report

if TYPE_CHECKING:
    from flowtagger.utils.config import ProcessingSettings

logger = logging.getLogger("flowtagger.netflow.processor")


class FlowLogProcessor:
    """청크 단위 병렬 집계 엔진.

    로그 파일을 chunk_size 줄씩 스트리밍하며 청크마다 하나의 작업을
    pool_size 크기의 스레드 풀에 제출한다. 각 작업은 로컬 ChunkTally에
    누적한 뒤 실행 단위 FlowCounters에 한 번에 병합한다.

    모든 작업이 끝날 때까지 최대 max_wait_seconds 동안 기다리며,
    시간 안에 끝나지 않은 청크는 버리고 그 시점의 집계로 보고서를 쓴다.
    재시도하지 않는다.
    """

    def __init__(
        self,
        lookup_table: LookupTable,
        chunk_size: int = 1000,
        pool_size: int = 10,
        max_wait_seconds: float = 3600,
        resolver: ProtocolResolver | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if pool_size <= 0:
            raise ValueError(f"pool_size must be positive, got {pool_size}")
        if max_wait_seconds <= 0:
            raise ValueError(f"max_wait_seconds must be positive, got {max_wait_seconds}")

        self._lookup           = lookup_table
        self._chunk_size       = chunk_size
        self._pool_size        = pool_size
        self._max_wait_seconds = max_wait_seconds
        self._resolver         = resolver if resolver is not None else ProtocolResolver()

    @classmethod
    def from_settings(
        cls,
        lookup_table: LookupTable,
        settings: ProcessingSettings,
        resolver: ProtocolResolver | None = None,
    ) -> FlowLogProcessor:
        return cls(
            lookup_table,
            chunk_size=settings.chunk_size,
            pool_size=settings.pool_size,
            max_wait_seconds=settings.max_wait_seconds,
            resolver=resolver,
        )

    @property
    def resolver(self) -> ProtocolResolver:
        return self._resolver

    def process_log_file(
        self, input_path: str | Path, output_path: str | Path,
    ) -> AggregationResult:
        """로그 파일을 집계하고 보고서를 쓴다.

        Raises:
            OSError: 로그 파일을 열거나 읽을 수 없는 경우 (보고서는 쓰지 않는다).
            ReportWriteError: 집계 후 보고서 쓰기에 실패한 경우.
        """
        result = self.aggregate(input_path)
        write_report(
            output_path,
            result.tag_count,
            result.untagged_count,
            result.port_protocol_count,
        )
        return result

    def aggregate(self, input_path: str | Path) -> AggregationResult:
        """로그 파일을 병렬 집계하여 AggregationResult를 반환한다. 보고서는 쓰지 않는다."""
        counters = FlowCounters()
        cancelled = threading.Event()
        futures: list[Future] = []
        executor = ThreadPoolExecutor(
            max_workers=self._pool_size,
            thread_name_prefix="flowtagger-chunk",
        )

        try:
            for index, chunk in enumerate(read_chunks(input_path, self._chunk_size)):
                futures.append(executor.submit(self._run_chunk, index, chunk, counters, cancelled))
        except BaseException:
            cancelled.set()
            executor.shutdown(wait=False, cancel_futures=True)
            counters.freeze()
            raise

        logger.debug(
            "Submitted %d chunks from %s (chunk_size=%d, pool_size=%d)",
            len(futures), input_path, self._chunk_size, self._pool_size,
        )

        done, pending = wait(futures, timeout=self._max_wait_seconds)
        if pending:
            # 실행 중인 청크는 다음 라인에서 멈춘다
            cancelled.set()
            for future in pending:
                future.cancel()
            logger.error(
                "Chunk processing did not finish within %ss: abandoning %d of %d chunks, "
                "reporting partial results",
                self._max_wait_seconds, len(pending), len(futures),
            )
        executor.shutdown(wait=not pending, cancel_futures=True)

        snapshot = counters.freeze()
        failed = sum(1 for future in done if future.result() is False)

        result = AggregationResult.from_snapshot(
            snapshot,
            chunks_submitted=len(futures),
            chunks_failed=failed,
            chunks_abandoned=len(pending),
            timed_out=bool(pending),
        )
        self._log_summary(input_path, result)
        return result

    def _run_chunk(
        self,
        index: int,
        lines: list[str],
        counters: FlowCounters,
        cancelled: threading.Event,
    ) -> bool | None:
        """작업 경계. 예외는 여기서 잡아 로그로 남기고 해당 청크만 제외한다.

        성공하면 True, 예외로 실패하면 False, 타임아웃으로 중단되면 None.
        """
        try:
            tally = self.process_chunk(lines, cancelled)
        except Exception:
            logger.exception(
                "Chunk %d raised an exception; its %d lines are excluded", index, len(lines),
            )
            return False
        if tally is None:
            logger.debug("Chunk %d stopped after the wait deadline; result discarded", index)
            return None
        counters.merge(tally)
        return True

    def process_chunk(
        self, lines: list[str], cancelled: threading.Event | None = None,
    ) -> ChunkTally | None:
        """청크의 라인들을 파일 순서대로 처리하여 로컬 누적 결과를 반환한다.

        cancelled가 설정되면 남은 라인을 처리하지 않고 None을 반환한다.
        """
        tally = ChunkTally()
        protocol_numbers: set[int] = set()

        for line in lines:
            if cancelled is not None and cancelled.is_set():
                return None
            try:
                record = parse_flow_line(line)
            except ParseError as exc:
                tally.add_skip(exc.reason)
                logger.debug("Skipping log line (%s): %r", exc, line)
                continue

            protocol_numbers.add(record.protocol_number)
            protocol = self._resolver.resolve(record.protocol_number)
            tags = self._lookup.resolve_tags(record.dst_port, protocol)
            tally.add_record(port_protocol_key(record.dst_port, protocol), tags)

        self._resolver.warm(protocol_numbers)
        return tally

    def _log_summary(self, input_path: str | Path, result: AggregationResult) -> None:
        logger.info(
            "Processed %s: %d records parsed, %d skipped, %d chunks (%d failed, %d abandoned)",
            input_path, result.parsed_records, result.skipped_records,
            result.chunks_submitted, result.chunks_failed, result.chunks_abandoned,
        )
        for reason, count in sorted(result.skipped.items(), key=lambda item: item[0].value):
            logger.info("Skipped %d lines: %s", count, reason.value)
        logger.info("Total untagged entries: %d", result.untagged_count)
