"""순서를 보존하는 고정 크기 청크 분할기."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path


def _check_chunk_size(chunk_size: int) -> None:
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")


def iter_chunks(lines: Iterable[str], chunk_size: int) -> Iterator[list[str]]:
    """라인 시퀀스를 최대 chunk_size 개씩 묶어 순서대로 내보낸다.

    마지막 청크는 더 작을 수 있다. 모든 청크를 순서대로 이어 붙이면
    입력과 정확히 같다 (손실/중복/재정렬 없음).

    Raises:
        ValueError: chunk_size가 양의 정수가 아닌 경우.
    """
    _check_chunk_size(chunk_size)

    buffer: list[str] = []
    for line in lines:
        buffer.append(line)
        if len(buffer) == chunk_size:
            yield buffer
            buffer = []

    if buffer:
        yield buffer


def read_chunks(path: str | Path, chunk_size: int) -> Iterator[list[str]]:
    """파일을 한 줄씩 스트리밍하며 청크 단위로 내보낸다.

    디코딩할 수 없는 바이트는 대체 문자로 바꾼다. 그런 라인은 파서에서 걸러진다.
    파일을 열거나 읽지 못하면 OSError가 그대로 전파된다.
    """
    _check_chunk_size(chunk_size)

    with open(path, encoding="utf-8", errors="replace") as f:
        yield from iter_chunks((line.rstrip("\r\n") for line in f), chunk_size)
