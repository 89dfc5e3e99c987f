# pktsplit/cli.py
import argparse
import dataclasses
import json
from itertools import islice
from pathlib import Path

from .config import BUILTIN_PROFILES, ConfigError, load_profile
from .core import PacketSplitter
from .framing import frame_stats
from .stream import PCAP_FILE_HDR_LEN, iter_pcap_records, pcap_byteorder, read_pcap_header, sniff_kind
from .utils import log, setup


def _load_input(args):
    try:
        profile = load_profile(args.profiles, args.profile)
        data = Path(args.file).read_bytes()
    except (ConfigError, OSError) as e:
        raise SystemExit(f"error: {e}")
    if profile.skip > len(data):
        raise SystemExit(f"error: {args.file} is shorter than the {profile.skip}-byte skip of profile {profile.name!r}")
    if profile.kind == "pcap_record" and profile.skip == PCAP_FILE_HDR_LEN:
        # record headers follow the byte order of the capture's global header
        order = pcap_byteorder(data)
        if order is not None and order != profile.byteorder:
            profile = dataclasses.replace(profile, byteorder=order)
    log.info(f"Framing {args.file} with profile {profile.name!r} ({profile.kind})")
    return profile, memoryview(data)[profile.skip:]


def cmd_split(args) -> int:
    profile, view = _load_input(args)
    splitter = PacketSplitter(view, profile.sizing())
    offset = profile.skip
    for idx, pkt in enumerate(islice(splitter, args.limit)):
        if args.json:
            print(json.dumps({"index": idx, "offset": offset, "length": len(pkt)}))
        else:
            print(f"{idx} {offset} {len(pkt)}")
        offset += len(pkt)

    if len(splitter.remaining) == 0:
        status = "clean"
    elif splitter.exhausted:
        status = "truncated"
    else:
        status = "stopped"
    print(f"# {status}: {splitter.consumed} bytes framed, {len(splitter.remaining)} bytes remaining")
    return 0


def cmd_stats(args) -> int:
    profile, view = _load_input(args)
    stats = frame_stats(view, profile.sizing())
    out = {"file": str(args.file), "profile": profile.name, **stats.to_dict()}
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


def cmd_pcap(args) -> int:
    try:
        kind = sniff_kind(args.file)
        if kind != "pcap":
            raise ValueError(f"{args.file}: {kind} is not supported, classic pcap only")
        data = Path(args.file).read_bytes()
        header = read_pcap_header(data)
    except (ValueError, OSError) as e:
        raise SystemExit(f"error: {e}")
    count = sum(1 for _ in iter_pcap_records(data))
    print(f"{args.file}\tlinktype={header.linktype}\tsnaplen={header.snaplen}\tpackets={count}")
    return 0


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _add_framing_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file")
    p.add_argument("--profile", default="u32be",
                   help=f"profile name (built-in: {', '.join(sorted(BUILTIN_PROFILES))}); "
                        "pcap_record profiles with a 24-byte skip take their byte order from the capture")
    p.add_argument("--profiles", default=None, help="YAML file with extra profiles")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pktsplit", description="Split length-delimited packets out of a file")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--log-dir", default=None, help="also write rotating logs here")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("split", help="print packet boundaries")
    _add_framing_args(sp)
    sp.add_argument("--limit", type=_non_negative_int, default=None, help="stop after N packets")
    sp.add_argument("--json", action="store_true", help="JSON lines output")
    sp.set_defaults(func=cmd_split)

    st = sub.add_parser("stats", help="print framing statistics as JSON")
    _add_framing_args(st)
    st.set_defaults(func=cmd_stats)

    pc = sub.add_parser("pcap", help="count records of a classic pcap file")
    pc.add_argument("file")
    pc.set_defaults(func=cmd_pcap)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup(log_dir=args.log_dir, level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
