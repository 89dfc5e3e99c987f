import pytest

from pktsplit.config import BUILTIN_PROFILES, ConfigError, load_profile, load_profiles
from pktsplit.framing import split_packets

PROFILES_YAML = """
profiles:
  tlv:
    kind: length_field
    offset: 1
    width: 2
    byteorder: little
  cells:
    kind: fixed
    size: 4
  capture:
    kind: pcap_record
    byteorder: little
    skip: 24
    snaplen: 262144
"""


@pytest.fixture
def profiles_file(tmp_path):
    p = tmp_path / "profiles.yaml"
    p.write_text(PROFILES_YAML, encoding="utf-8")
    return p


def test_load_profiles(profiles_file):
    profiles = load_profiles(profiles_file)
    assert set(profiles) == {"tlv", "cells", "capture"}
    assert profiles["capture"].skip == 24
    assert profiles["tlv"].width == 2


def test_profile_sizing_frames_data(profiles_file):
    sizing = load_profiles(profiles_file)["tlv"].sizing()
    packets, rem = split_packets(b"\x01\x01\x00a\x02\x00\x00", sizing)
    assert packets == [b"\x01\x01\x00a", b"\x02\x00\x00"]
    assert len(rem) == 0


def test_load_profile_falls_back_to_builtin(profiles_file):
    assert load_profile(profiles_file, "cells").size == 4
    assert load_profile(profiles_file, "u32be") is BUILTIN_PROFILES["u32be"]
    assert load_profile(None, "pcap").skip == 24
    with pytest.raises(ConfigError):
        load_profile(None, "nope")


def test_builtin_profiles_build():
    for profile in BUILTIN_PROFILES.values():
        assert callable(profile.sizing())


@pytest.mark.parametrize(
    "doc, fragment",
    [
        ("profiles: {x: {kind: morse}}", "kind must be one of"),
        ("profiles: {x: {kind: fixed}}", "needs 'size'"),
        ("profiles: {x: {kind: length_field, width: 3}}", "width"),
        ("profiles: {x: {kind: fixed, size: 2, colour: red}}", "unknown keys"),
        ("profiles: {x: {kind: fixed, size: 2, skip: -1}}", "skip"),
        ("profiles: {x: [1, 2]}", "expected a mapping"),
        ("framing: {}", "top-level 'profiles'"),
        ("profiles: [", "invalid YAML"),
        ("profiles: {x: {kind: fixed, size: 2.5}}", "size must be an integer"),
        ("profiles: {x: {kind: length_field, adjust: 0.5}}", "adjust must be an integer"),
        ("profiles: {x: {kind: fixed, size: 2, skip: 1.5}}", "skip must be an integer"),
        ("profiles: {x: {kind: length_field, width: true}}", "width must be an integer"),
        ("profiles: {x: {kind: length_field, inclusive: 1}}", "inclusive must be true or false"),
        ("profiles: {x: {kind: length_field, byteorder: 1}}", "byteorder must be a string"),
    ],
)
def test_bad_profiles(tmp_path, doc, fragment):
    p = tmp_path / "bad.yaml"
    p.write_text(doc, encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_profiles(p)
    assert fragment in str(exc.value)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
