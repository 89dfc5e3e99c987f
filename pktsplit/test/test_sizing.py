import struct

import pytest

from pktsplit import count_packets, split_packets
from pktsplit.sizing import fixed_size, length_field, pcap_record, self_inclusive_prefix


def test_self_inclusive_prefix_on_empty():
    assert self_inclusive_prefix(b"") == 0
    assert self_inclusive_prefix([7, 1]) == 7


def test_u32_big_endian_prefix():
    data = b"\x00\x00\x00\x03abc" + b"\x00\x00\x00\x01z"
    packets, rem = split_packets(data, length_field())
    assert packets == [b"\x00\x00\x00\x03abc", b"\x00\x00\x00\x01z"]
    assert len(rem) == 0


def test_length_after_type_byte_little_endian():
    sizing = length_field(offset=1, width=2, byteorder="little")
    data = b"\x07\x02\x00hi" + b"\x08\x00\x00"
    packets, rem = split_packets(data, sizing)
    assert packets == [b"\x07\x02\x00hi", b"\x08\x00\x00"]
    assert len(rem) == 0


def test_inclusive_length_with_trailer():
    # length counts header+payload, a 2-byte checksum follows
    sizing = length_field(width=2, inclusive=True, adjust=2)
    data = b"\x00\x04ab" + b"cc" + b"\x00\x09"
    packets, rem = split_packets(data, sizing)
    assert packets == [b"\x00\x04abcc"]
    assert rem == b"\x00\x09"


def test_short_header_ends_stream():
    sizing = length_field(width=4)
    assert sizing(b"\x00\x00") == 0
    packets, rem = split_packets(b"\x00\x00\x00\x01x\x00\x00", sizing)
    assert packets == [b"\x00\x00\x00\x01x"]
    assert rem == b"\x00\x00"


def test_explicit_header_length():
    # 1-byte length at offset 0, 3 header bytes in total
    sizing = length_field(width=1, header=3)
    assert sizing(b"\x02\xaa\xbbxy") == 5


def test_length_field_works_on_non_bytes_sequences():
    packets, rem = split_packets([0, 2, 9, 9, 0, 0], length_field(width=2))
    assert [p.tolist() for p in packets] == [[0, 2, 9, 9], [0, 0]]
    assert len(rem) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 3},
        {"byteorder": "middle"},
        {"offset": -1},
        {"offset": 2, "width": 2, "header": 3},
    ],
)
def test_length_field_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        length_field(**kwargs)


def test_fixed_size_drops_partial_record():
    packets, rem = split_packets(b"abcdefgh", fixed_size(3))
    assert packets == [b"abc", b"def"]
    assert rem == b"gh"


def test_fixed_size_must_be_positive():
    with pytest.raises(ValueError):
        fixed_size(0)


def test_pcap_record_sizes():
    rec = struct.pack("<IIII", 1, 2, 5, 5) + b"hello"
    assert pcap_record()(rec) == 21
    assert pcap_record()(rec[:10]) == 0
    assert pcap_record(byteorder="big")(struct.pack(">IIII", 1, 2, 3, 3) + b"abc") == 19


def test_pcap_record_caplen_over_snaplen_ends_stream():
    rec = struct.pack("<IIII", 1, 2, 100, 100) + b"x" * 100
    assert pcap_record(snaplen=64)(rec) == 0
    packets, rem = split_packets(rec, pcap_record(snaplen=64))
    assert packets == []
    assert len(rem) == len(rec)


def test_count_packets():
    assert count_packets(b"abcdefgh", fixed_size(2)) == 4
    assert count_packets(b"", fixed_size(2)) == 0
