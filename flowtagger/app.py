"""메인 오케스트레이터: 입력 검증, 룩업 테이블 구축, 병렬 집계, 보고서 작성."""

from __future__ import annotations

import logging
from pathlib import Path

from flowtagger.lookup.table import LookupTable
from flowtagger.netflow.counters import AggregationResult
from flowtagger.netflow.processor import FlowLogProcessor
from flowtagger.netflow.protocols import ProtocolResolver
from flowtagger.utils.config import Config, ProcessingSettings
from flowtagger.utils.validation import validate_readable

logger = logging.getLogger("flowtagger.app")


class InputFileError(OSError):
    """입력 파일이 없거나 읽을 수 없음."""


class FlowTagger:
    """최상위 애플리케이션 오케스트레이터.

    실행마다 새 FlowLogProcessor와 카운터를 만들므로 전역 상태가 없다.
    """

    def __init__(self, config: Config, resolver: ProtocolResolver | None = None) -> None:
        self.config   = config
        self.settings = ProcessingSettings.from_config(config)
        self._resolver = resolver

    @staticmethod
    def _validate_inputs(*paths: str | Path) -> None:
        invalid = [str(p) for p in paths if not validate_readable(p)]
        if invalid:
            raise InputFileError(f"Invalid input file(s): {', '.join(invalid)}")

    def build_processor(self, lookup_path: str | Path) -> FlowLogProcessor:
        """룩업 파일을 읽어 FlowLogProcessor를 만든다."""
        lookup_table = LookupTable.load(lookup_path)
        return FlowLogProcessor.from_settings(
            lookup_table, self.settings, resolver=self._resolver,
        )

    def run(
        self,
        log_path: str | Path,
        lookup_path: str | Path,
        output_path: str | Path | None = None,
    ) -> AggregationResult:
        """두 입력 파일을 검증하고 로그를 집계하여 보고서를 쓴다.

        output_path를 생략하면 설정의 output.path를 사용한다.

        Raises:
            InputFileError: 입력 파일 검증 실패.
            LookupLoadError: 룩업 파일 로드 실패.
            ReportWriteError: 보고서 쓰기 실패.
        """
        self._validate_inputs(log_path, lookup_path)

        if output_path is None:
            output_path = self.config.get("output.path", "output.txt")

        logger.info(
            "Processing %s with lookup %s (chunk_size=%d, pool_size=%d, max_wait=%ds)",
            log_path, lookup_path,
            self.settings.chunk_size, self.settings.pool_size, self.settings.max_wait_seconds,
        )
        processor = self.build_processor(lookup_path)
        return processor.process_log_file(log_path, output_path)

    def aggregate(self, log_path: str | Path, lookup_path: str | Path) -> AggregationResult:
        """보고서를 쓰지 않고 집계만 한다."""
        self._validate_inputs(log_path, lookup_path)
        return self.build_processor(lookup_path).aggregate(log_path)
