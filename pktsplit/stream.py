# pktsplit/stream.py (classic pcap framed with PacketSplitter, dpkt for header parsing)
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import dpkt

from .core import PacketSplitter
from .sizing import PCAP_RECORD_HDR_LEN, pcap_record
from .utils import get_logger

log = get_logger("stream")

PCAP_FILE_HDR_LEN = dpkt.pcap.FileHdr.__hdr_len__  # 24

# raw leading bytes -> (byteorder, nanosecond timestamps)
_PCAP_MAGIC = {
    b"\xd4\xc3\xb2\xa1": ("little", False),
    b"\x4d\x3c\xb2\xa1": ("little", True),
    b"\xa1\xb2\xc3\xd4": ("big", False),
    b"\xa1\xb2\x3c\x4d": ("big", True),
}
_PCAPNG_MAGIC = b"\x0a\x0d\x0d\x0a"


def sniff_kind(path: Union[str, Path]) -> str:
    with open(path, "rb") as f:
        head = f.read(4)
    if head in _PCAP_MAGIC:
        return "pcap"
    if head == _PCAPNG_MAGIC:
        return "pcapng"
    raise ValueError(f"Unknown capture format (not pcap/pcapng): {path}")


def pcap_byteorder(buf) -> Optional[str]:
    """Byte order announced by a classic pcap magic, None for anything else."""
    entry = _PCAP_MAGIC.get(bytes(memoryview(buf)[:4]))
    return entry[0] if entry else None


@dataclass(frozen=True)
class PcapHeader:
    byteorder: str
    nano: bool
    snaplen: int
    linktype: int
    version: Tuple[int, int]


@dataclass(frozen=True)
class PcapRecord:
    ts: float
    caplen: int
    wirelen: int
    data: memoryview


def read_pcap_header(buf) -> PcapHeader:
    """Parse the 24-byte global header of a classic pcap capture."""
    view = memoryview(buf)
    if len(view) < PCAP_FILE_HDR_LEN:
        raise ValueError("buffer too small for a pcap global header")
    magic = bytes(view[:4])
    if magic not in _PCAP_MAGIC:
        raise ValueError(f"Invalid pcap magic: {magic.hex()}")
    byteorder, nano = _PCAP_MAGIC[magic]
    hdr_cls = dpkt.pcap.LEFileHdr if byteorder == "little" else dpkt.pcap.FileHdr
    fh = hdr_cls(bytes(view[:PCAP_FILE_HDR_LEN]))
    return PcapHeader(
        byteorder=byteorder,
        nano=nano,
        snaplen=fh.snaplen,
        linktype=fh.linktype,
        version=(fh.v_major, fh.v_minor),
    )


def iter_pcap_records(buf) -> Iterator[PcapRecord]:
    """
    Yield every complete record of an in-memory classic pcap capture.
    Record data are memoryviews into buf; a truncated tail is dropped.
    """
    header = read_pcap_header(buf)
    hdr_cls = dpkt.pcap.LEPktHdr if header.byteorder == "little" else dpkt.pcap.PktHdr
    divisor = 1_000_000_000.0 if header.nano else 1_000_000.0

    # snaplen is advisory: writers in the wild exceed it, so framing relies on caplen
    splitter = PacketSplitter(memoryview(buf)[PCAP_FILE_HDR_LEN:], pcap_record(header.byteorder))
    for raw in splitter:
        ph = hdr_cls(bytes(raw[:PCAP_RECORD_HDR_LEN]))
        yield PcapRecord(
            ts=float(ph.tv_sec) + float(ph.tv_usec) / divisor,
            caplen=ph.caplen,
            wirelen=ph.len,
            data=raw[PCAP_RECORD_HDR_LEN:],
        )

    if splitter.truncated:
        log.warning(
            f"Truncated pcap tail: {len(splitter.remaining)} bytes dropped "
            f"after {splitter.consumed} record bytes"
        )


def stream_pcap_packets(pcap_path: Union[str, Path]) -> Iterator[Tuple[float, bytes]]:
    """Yield (ts, pkt_bytes) from a classic pcap file."""
    kind = sniff_kind(pcap_path)
    if kind != "pcap":
        raise ValueError("stream supports classic pcap only")
    data = Path(pcap_path).read_bytes()
    log.debug(f"Framing {pcap_path} ({len(data)} bytes)")
    for rec in iter_pcap_records(data):
        yield rec.ts, bytes(rec.data)
