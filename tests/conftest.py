"""Shared fixtures for FlowTagger tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from flowtagger.netflow.protocols import ProtocolResolver

# 실제 IANA 번호 일부. 레지스트리가 대문자를 돌려줘도 소문자로 정규화되는지 확인하기 위해 섞어 둔다.
TEST_REGISTRY = {
    1:  "ICMP",
    6:  "TCP",
    17: "udp",
    47: "GRE",
    50: "esp",
}

LOOKUP_CONTENT = """\
25,tcp,sv_P1
68,udp,sv_P2
23,tcp,sv_P1
31,udp,SV_P3
443,tcp,sv_P2
110,tcp,email
993,tcp,email
143,tcp,email
80,tcp,web
80,TCP,http
80,tcp,web
"""


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """사용자 환경의 FLOWTAGGER_* 변수가 테스트에 섞이지 않도록 제거한다."""
    for var in (
        "FLOWTAGGER_CONFIG",
        "FLOWTAGGER_CHUNK_SIZE",
        "FLOWTAGGER_POOL_SIZE",
        "FLOWTAGGER_MAX_WAIT_SECONDS",
        "FLOWTAGGER_OUTPUT_PATH",
        "FLOWTAGGER_LOG_LEVEL",
        "FLOWTAGGER_LOG_DIR",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def registry() -> dict[int, str]:
    return dict(TEST_REGISTRY)


@pytest.fixture
def resolver(registry) -> ProtocolResolver:
    """결정적인 테스트 레지스트리를 쓰는 ProtocolResolver."""
    return ProtocolResolver(registry)


@pytest.fixture
def lookup_file(tmp_path: Path) -> Path:
    p = tmp_path / "lookup.csv"
    p.write_text(LOOKUP_CONTENT)
    return p


@pytest.fixture
def default_registry_stub(monkeypatch, registry):
    """scapy 레지스트리 대신 테스트 레지스트리를 기본값으로 사용하게 한다."""
    from flowtagger.netflow import protocols

    monkeypatch.setattr(protocols, "default_registry", lambda: registry)
    return registry
