# pktsplit/config.py
"""
Framing profiles: named recipes turning a YAML description into a SizingFn.

Example file:

    profiles:
      tlv:
        kind: length_field
        offset: 1
        width: 2
        byteorder: big
      capture:
        kind: pcap_record
        skip: 24
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .core import SizingFn
from .sizing import fixed_size, length_field, pcap_record, self_inclusive_prefix

KINDS = ("length_field", "fixed", "self_inclusive", "pcap_record")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class FramingProfile:
    name: str
    kind: str
    skip: int = 0
    offset: int = 0
    width: int = 4
    byteorder: str = "big"
    header: Optional[int] = None
    adjust: int = 0
    inclusive: bool = False
    size: Optional[int] = None
    snaplen: Optional[int] = None

    def sizing(self) -> SizingFn:
        if self.kind == "length_field":
            return length_field(
                offset=self.offset,
                width=self.width,
                byteorder=self.byteorder,
                header=self.header,
                adjust=self.adjust,
                inclusive=self.inclusive,
            )
        if self.kind == "fixed":
            if self.size is None:
                raise ConfigError(f"profile {self.name!r}: kind 'fixed' needs 'size'")
            return fixed_size(self.size)
        if self.kind == "self_inclusive":
            return self_inclusive_prefix
        if self.kind == "pcap_record":
            return pcap_record(byteorder=self.byteorder, snaplen=self.snaplen)
        raise ConfigError(f"profile {self.name!r}: unknown kind {self.kind!r}")


BUILTIN_PROFILES: Dict[str, FramingProfile] = {
    "pcap": FramingProfile(name="pcap", kind="pcap_record", skip=24, byteorder="little"),
    "u32be": FramingProfile(name="u32be", kind="length_field", width=4, byteorder="big"),
    "u16be": FramingProfile(name="u16be", kind="length_field", width=2, byteorder="big"),
    "self_inclusive": FramingProfile(name="self_inclusive", kind="self_inclusive"),
}

_FIELD_NAMES = {f.name for f in fields(FramingProfile)} - {"name"}
_INT_FIELDS = ("skip", "offset", "width", "header", "adjust", "size", "snaplen")


def _check_types(name: str, raw: Dict[str, Any]) -> None:
    for key in _INT_FIELDS:
        value = raw.get(key)
        # bool is an int subclass; "yes" in YAML must not become a width of 1
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"profile {name!r}: {key} must be an integer, got {value!r}")
    if "inclusive" in raw and not isinstance(raw["inclusive"], bool):
        raise ConfigError(f"profile {name!r}: inclusive must be true or false, got {raw['inclusive']!r}")
    if "byteorder" in raw and not isinstance(raw["byteorder"], str):
        raise ConfigError(f"profile {name!r}: byteorder must be a string, got {raw['byteorder']!r}")


def _build_profile(name: str, raw: Any) -> FramingProfile:
    if not isinstance(raw, dict):
        raise ConfigError(f"profile {name!r}: expected a mapping, got {type(raw).__name__}")
    unknown = set(raw) - _FIELD_NAMES
    if unknown:
        raise ConfigError(f"profile {name!r}: unknown keys {sorted(unknown)}")
    kind = str(raw.get("kind", "")).strip().lower()
    if kind not in KINDS:
        raise ConfigError(f"profile {name!r}: kind must be one of {KINDS}, got {raw.get('kind')!r}")
    _check_types(name, raw)
    params = dict(raw)
    params["kind"] = kind
    try:
        profile = FramingProfile(name=name, **params)
        if profile.skip < 0:
            raise ValueError("skip must be >= 0")
        # validate parameters early rather than on first use
        profile.sizing()
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"profile {name!r}: {e}") from e
    return profile


def load_profiles(path: Union[str, Path]) -> Dict[str, FramingProfile]:
    text = Path(path).read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    if not isinstance(doc, dict) or not isinstance(doc.get("profiles"), dict):
        raise ConfigError(f"{path}: expected a top-level 'profiles' mapping")
    return {str(name): _build_profile(str(name), raw) for name, raw in doc["profiles"].items()}


def load_profile(path: Optional[Union[str, Path]], name: str) -> FramingProfile:
    """Look name up in path (if given), then in BUILTIN_PROFILES."""
    profiles: Dict[str, FramingProfile] = {}
    if path is not None:
        profiles = load_profiles(path)
    if name in profiles:
        return profiles[name]
    if name in BUILTIN_PROFILES:
        return BUILTIN_PROFILES[name]
    raise ConfigError(f"unknown profile {name!r}")
