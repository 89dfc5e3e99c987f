# pktsplit/framing.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from .core import PacketSplitter, SizingFn


def split_packets(data: Any, sizing: SizingFn) -> Tuple[List[Any], Any]:
    """Drain a splitter: (packets, remainder). remainder is empty on a clean end."""
    splitter = PacketSplitter(data, sizing)
    packets = list(splitter)
    return packets, splitter.remaining


def count_packets(data: Any, sizing: SizingFn) -> int:
    return sum(1 for _ in PacketSplitter(data, sizing))


@dataclass(frozen=True)
class FrameStats:
    packets: int
    consumed: int
    remaining: int
    truncated: bool
    min_len: Optional[int] = None
    max_len: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def frame_stats(data: Any, sizing: SizingFn) -> FrameStats:
    splitter = PacketSplitter(data, sizing)
    n = 0
    lo: Optional[int] = None
    hi: Optional[int] = None
    for pkt in splitter:
        size = len(pkt)
        n += 1
        lo = size if lo is None else min(lo, size)
        hi = size if hi is None else max(hi, size)
    return FrameStats(
        packets=n,
        consumed=splitter.consumed,
        remaining=len(splitter.remaining),
        truncated=splitter.truncated,
        min_len=lo,
        max_len=hi,
    )
