# pktsplit/__init__.py
from .core import PacketSplitter, SizingFn, Span
from .framing import FrameStats, count_packets, frame_stats, split_packets

__all__ = [
    "PacketSplitter",
    "SizingFn",
    "Span",
    "FrameStats",
    "count_packets",
    "frame_stats",
    "split_packets",
]
