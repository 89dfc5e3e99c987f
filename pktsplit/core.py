# pktsplit/core.py
from __future__ import annotations

import operator
from collections.abc import Sequence
from typing import Any, Callable, Iterator, List, Optional, Union

from .utils import get_logger

log = get_logger("core")

SizingFn = Callable[[Sequence], int]


class Span(Sequence):
    """
    Read-only window [start, stop) over a sequence. Never copies the base.

    Contiguous slices give another Span over the same base; stepped slices
    fall back to a list since they are not a contiguous region anymore.
    """

    __slots__ = ("_base", "_start", "_stop")

    def __init__(self, base: Sequence, start: int = 0, stop: Optional[int] = None):
        n = len(base)
        if stop is None:
            stop = n
        if not 0 <= start <= stop <= n:
            raise ValueError(f"invalid span [{start}, {stop}) over {n} items")
        self._base = base
        self._start = start
        self._stop = stop

    @property
    def base(self) -> Sequence:
        return self._base

    @property
    def start(self) -> int:
        return self._start

    @property
    def stop(self) -> int:
        return self._stop

    def __len__(self) -> int:
        return self._stop - self._start

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self))
            if step == 1:
                stop = max(start, stop)
                return Span(self._base, self._start + start, self._start + stop)
            return [self._base[self._start + i] for i in range(start, stop, step)]
        i = operator.index(index)
        if i < 0:
            i += len(self)
        if not 0 <= i < len(self):
            raise IndexError("span index out of range")
        return self._base[self._start + i]

    def __iter__(self) -> Iterator[Any]:
        base = self._base
        for i in range(self._start, self._stop):
            yield base[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sequence) or isinstance(other, str):
            return NotImplemented
        if len(other) != len(self):
            return False
        return all(a == b for a, b in zip(self, other))

    __hash__ = None  # type: ignore[assignment]

    def tolist(self) -> List[Any]:
        return list(self)

    def __repr__(self) -> str:
        return f"Span({self.tolist()!r})"


def as_view(data: Any) -> Union[memoryview, Span]:
    """memoryview for buffer-protocol objects, Span for any other sequence."""
    if isinstance(data, Span):
        return data
    try:
        view = memoryview(data)
    except TypeError:
        return Span(data)
    if view.ndim != 1:
        view = view.cast("B")
    return view


class PacketSplitter:
    """
    Lazy splitter yielding successive packets out of a contiguous sequence.

    Each pull asks ``sizing`` for the length of the next packet, looking only
    at the not-yet-consumed remainder. A size of 0 (or less) or a size past
    the end of the remainder stops iteration for good; the tail is left in
    ``remaining`` and ``truncated`` reports it. Nothing is raised for
    malformed input, only exceptions from ``sizing`` itself propagate.

    Packets are views (memoryview for bytes-like data, Span otherwise) over
    the caller's buffer, which must not be mutated while the splitter or any
    packet it produced is in use.
    """

    def __init__(self, data: Any, sizing: SizingFn):
        self._remaining = as_view(data)
        self._sizing = sizing
        self._consumed = 0
        self._exhausted = False

    @property
    def remaining(self) -> Union[memoryview, Span]:
        return self._remaining

    @property
    def consumed(self) -> int:
        return self._consumed

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def truncated(self) -> bool:
        """True once stopped with unconsumed data left behind."""
        return self._exhausted and len(self._remaining) > 0

    def pull(self) -> Optional[Union[memoryview, Span]]:
        if self._exhausted:
            return None
        rest = self._remaining
        if len(rest) == 0:
            self._exhausted = True
            return None

        n = operator.index(self._sizing(rest))
        if n <= 0 or n > len(rest):
            self._exhausted = True
            log.debug("stop at offset %d: size %d, %d remaining", self._consumed, n, len(rest))
            return None

        packet = rest[:n]
        self._remaining = rest[n:]
        self._consumed += n
        return packet

    def __iter__(self) -> "PacketSplitter":
        return self

    def __next__(self) -> Union[memoryview, Span]:
        packet = self.pull()
        if packet is None:
            raise StopIteration
        return packet

    def __repr__(self) -> str:
        state = "exhausted" if self._exhausted else "active"
        return f"<PacketSplitter {state} consumed={self._consumed} remaining={len(self._remaining)}>"
