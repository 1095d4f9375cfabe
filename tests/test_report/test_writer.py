"""보고서 작성기 단위 테스트."""

from pathlib import Path

import pytest

from flowtagger.report.writer import ReportWriteError, render_report, write_report


class TestRenderReport:
    def test_layout(self):
        text = render_report(
            {"sv_P1": 2, "email": 3},
            5,
            {"25,tcp": 2, "110,tcp": 3, "9999,udp": 5},
        )
        assert text == (
            "Tag Counts:\n"
            "email,3\n"
            "sv_P1,2\n"
            "Untagged,5\n"
            "\n"
            "Port/Protocol Combination Counts:\n"
            "9999,udp,5\n"
            "110,tcp,3\n"
            "25,tcp,2\n"
        )

    def test_empty_counts(self):
        assert render_report({}, 0, {}) == (
            "Tag Counts:\n"
            "Untagged,0\n"
            "\n"
            "Port/Protocol Combination Counts:\n"
        )

    def test_ties_ordered_by_key(self):
        text = render_report({"b": 1, "a": 1}, 0, {})
        assert text.index("a,1") < text.index("b,1")


class TestWriteReport:
    def test_writes_file(self, tmp_path: Path):
        out = write_report(tmp_path / "out.txt", {"sv_P1": 1}, 0, {"25,tcp": 1})
        assert out.read_text() == render_report({"sv_P1": 1}, 0, {"25,tcp": 1})

    def test_overwrites_existing(self, tmp_path: Path):
        out = tmp_path / "out.txt"
        out.write_text("stale content\n" * 10)
        write_report(out, {}, 1, {"1,icmp": 1})
        assert "stale" not in out.read_text()

    def test_unwritable_path_raises(self, tmp_path: Path):
        with pytest.raises(ReportWriteError):
            write_report(tmp_path / "missing" / "out.txt", {}, 0, {})

    def test_directory_path_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            write_report(tmp_path, {}, 0, {})
