"""입력 파일 검증 단위 테스트."""

import logging
import os
from pathlib import Path

import pytest

from flowtagger.utils.validation import validate_readable


class TestValidateReadable:
    def test_readable_file(self, tmp_path: Path):
        p = tmp_path / "flows.log"
        p.write_text("x\n")
        assert validate_readable(p) is True

    def test_missing_file(self, tmp_path: Path, caplog):
        with caplog.at_level(logging.ERROR, logger="flowtagger.utils.validation"):
            assert validate_readable(tmp_path / "missing.log") is False
        assert any("does not exist" in r.getMessage() for r in caplog.records)

    def test_directory(self, tmp_path: Path):
        assert validate_readable(tmp_path) is False

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root can read any file",
    )
    def test_unreadable_file(self, tmp_path: Path):
        p = tmp_path / "secret.log"
        p.write_text("x\n")
        p.chmod(0)
        try:
            assert validate_readable(p) is False
        finally:
            p.chmod(0o644)
