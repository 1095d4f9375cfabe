"""플로우 로그 라인 파서 단위 테스트."""

import pytest

from flowtagger.netflow.models import FlowRecord, SkipReason
from flowtagger.netflow.parser import ParseError, parse_flow_line


def _line(dst_port="25", protocol="6", status="OK") -> str:
    fields = [
        "2", "123456789012", "eni-0a1b2c3d", "10.0.0.1", "10.0.0.2",
        "1234", dst_port, protocol, "10", "100", "1620140761", "1620140821",
        "ACCEPT",
    ]
    if status is not None:
        fields.append(status)
    return " ".join(fields)


class TestParseFlowLine:
    def test_extracts_port_and_protocol(self):
        record = parse_flow_line(_line("25", "6"))
        assert record == FlowRecord(dst_port=25, protocol_number=6)

    def test_thirteen_fields_is_enough(self):
        record = parse_flow_line(_line("443", "17", status=None))
        assert record.dst_port == 443
        assert record.protocol_number == 17

    def test_extra_whitespace_and_newline(self):
        line = "  " + _line("80", "6").replace(" ", "   ") + "\n"
        assert parse_flow_line(line) == FlowRecord(dst_port=80, protocol_number=6)

    def test_extra_trailing_fields_allowed(self):
        assert parse_flow_line(_line("80", "6") + " extra more").dst_port == 80

    def test_boundary_values(self):
        assert parse_flow_line(_line("0", "0")) == FlowRecord(0, 0)
        assert parse_flow_line(_line("65535", "255")) == FlowRecord(65535, 255)


class TestSkippedLines:
    def test_too_few_fields(self):
        with pytest.raises(ParseError) as exc_info:
            parse_flow_line("2 123 eni-x 10.0.0.1 10.0.0.2 1234 25 6")
        assert exc_info.value.reason is SkipReason.TOO_FEW_FIELDS

    def test_empty_line(self):
        with pytest.raises(ParseError) as exc_info:
            parse_flow_line("")
        assert exc_info.value.reason is SkipReason.TOO_FEW_FIELDS

    @pytest.mark.parametrize("port", ["http", "-1", "65536", "2.5"])
    def test_invalid_port(self, port):
        with pytest.raises(ParseError) as exc_info:
            parse_flow_line(_line(port, "6"))
        assert exc_info.value.reason is SkipReason.INVALID_PORT

    @pytest.mark.parametrize("protocol", ["tcp", "-6", "256", "6.0"])
    def test_invalid_protocol(self, protocol):
        with pytest.raises(ParseError) as exc_info:
            parse_flow_line(_line("25", protocol))
        assert exc_info.value.reason is SkipReason.INVALID_PROTOCOL

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_flow_line("garbage")
