import struct

import dpkt
import pytest

from pktsplit import utils


def write_pcap(path, packets, ts0=1.0):
    """Write packets with dpkt.pcap.Writer, one per 0.5 s starting at ts0."""
    with open(path, "wb") as f:
        w = dpkt.pcap.Writer(f, snaplen=65535)
        for i, pkt in enumerate(packets):
            w.writepkt(pkt, ts=ts0 + 0.5 * i)
    return path


def big_endian_nano_pcap(packets):
    """Hand-built big-endian, nanosecond-resolution capture."""
    out = bytearray(struct.pack(">IHHiIII", 0xA1B23C4D, 2, 4, 0, 0, 65535, 1))
    for i, pkt in enumerate(packets):
        out += struct.pack(">IIII", 100 + i, 250_000_000, len(pkt), len(pkt) + 4)
        out += pkt
    return bytes(out)


@pytest.fixture
def sample_packets():
    return [b"\x00" * 60, bytes(range(42)), b"\xff" * 1514]


@pytest.fixture
def pcap_file(tmp_path, sample_packets):
    return write_pcap(tmp_path / "sample.pcap", sample_packets)


@pytest.fixture
def pcap_writer():
    return write_pcap


@pytest.fixture
def nano_pcap():
    return big_endian_nano_pcap


@pytest.fixture(autouse=True)
def fresh_logging():
    utils.reset()
    yield
    utils.reset()
