# miroku/common/iter.py
from __future__ import annotations

from typing import Callable, Hashable, Iterable, Iterator, List, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def chunked(it: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield fixed-size lists from an iterable (last chunk may be smaller)."""
    if size < 1:
        raise ValueError("size must be >= 1")
    buf: list[T] = []
    for x in it:
        buf.append(x)
        if len(buf) >= size:
            yield buf
            buf = []
    if buf:
        yield buf


def unique_by(items: Iterable[T], key: Callable[[T], K]) -> List[T]:
    """Keep the first item for each key, preserving order."""
    seen: set = set()
    out: List[T] = []
    for x in items:
        k = key(x)
        if k in seen:
            continue
        seen.add(k)
        out.append(x)
    return out
