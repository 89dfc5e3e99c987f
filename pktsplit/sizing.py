# pktsplit/sizing.py
"""
Stock sizing functions for PacketSplitter.

A sizing function gets the unconsumed remainder and returns the length of the
next packet. Returning 0 means "no packet here" and ends iteration, which is
also what every function below does when the remainder is too short to hold
the header it needs to read.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import dpkt

from .core import SizingFn

_WIDTHS = (1, 2, 4, 8)
_BYTEORDERS = ("big", "little")

PCAP_RECORD_HDR_LEN = dpkt.pcap.PktHdr.__hdr_len__  # 16


def self_inclusive_prefix(buf: Sequence) -> int:
    """First element is the packet length, counting itself."""
    if len(buf) == 0:
        return 0
    return int(buf[0])


def fixed_size(n: int) -> SizingFn:
    if n <= 0:
        raise ValueError("fixed packet size must be > 0")

    def _size(buf: Sequence) -> int:
        return n

    return _size


def length_field(
    offset: int = 0,
    width: int = 4,
    byteorder: str = "big",
    header: Optional[int] = None,
    adjust: int = 0,
    inclusive: bool = False,
) -> SizingFn:
    """
    Length read from an unsigned integer field inside the packet header.

    - offset/width/byteorder locate the field (width in 1, 2, 4, 8 bytes).
    - header is the number of bytes preceding the payload (default: end of
      the length field); packet size = header + value + adjust.
    - inclusive=True means the field already counts the whole packet;
      packet size = value + adjust.
    """
    if width not in _WIDTHS:
        raise ValueError(f"width must be one of {_WIDTHS}, got {width}")
    if byteorder not in _BYTEORDERS:
        raise ValueError(f"byteorder must be 'big' or 'little', got {byteorder!r}")
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if header is None:
        header = offset + width
    if header < offset + width:
        raise ValueError("header must cover the length field")
    end = offset + width

    def _size(buf: Sequence) -> int:
        if len(buf) < header:
            return 0
        value = int.from_bytes(bytes(buf[offset:end]), byteorder)
        if inclusive:
            return value + adjust
        return header + value + adjust

    return _size


def pcap_record(byteorder: str = "little", snaplen: Optional[int] = None) -> SizingFn:
    """Classic pcap record: 16-byte per-packet header followed by caplen bytes."""
    if byteorder not in _BYTEORDERS:
        raise ValueError(f"byteorder must be 'big' or 'little', got {byteorder!r}")
    hdr_cls = dpkt.pcap.LEPktHdr if byteorder == "little" else dpkt.pcap.PktHdr

    def _size(buf: Sequence) -> int:
        if len(buf) < PCAP_RECORD_HDR_LEN:
            return 0
        hdr = hdr_cls(bytes(buf[:PCAP_RECORD_HDR_LEN]))
        if snaplen is not None and hdr.caplen > snaplen:
            return 0
        return PCAP_RECORD_HDR_LEN + hdr.caplen

    return _size
