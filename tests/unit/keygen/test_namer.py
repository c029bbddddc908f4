import pytest

from keygen import namer
from keygen.models import KeySide, NamingScheme

PK = bytes.fromhex("a1b2c3") + b"\x00" * 46 + bytes.fromhex("d4e5f6")


def test_indexed_names():
    assert namer.stem(5, NamingScheme.indexed, PK) == "validator_5"
    assert namer.pair_file_names(5, NamingScheme.indexed, PK, "ssz") == (
        "validator_5_pk.ssz", "validator_5_sk.ssz",
    )


def test_byte_derived_names_use_public_key_affixes():
    assert namer.stem(5, NamingScheme.byte_derived, PK) == "validator-a1b2c3-d4e5f6"
    assert namer.pair_file_names(9, NamingScheme.byte_derived, PK, "json") == (
        "validator-a1b2c3-d4e5f6-pk.json", "validator-a1b2c3-d4e5f6-sk.json",
    )


def test_byte_derived_ignores_index():
    assert namer.stem(0, NamingScheme.byte_derived, PK) == namer.stem(41, NamingScheme.byte_derived, PK)


def test_indexed_ignores_key_bytes():
    assert namer.stem(3, NamingScheme.indexed, b"\x01") == namer.stem(3, NamingScheme.indexed, PK)


def test_file_name_separator_follows_scheme():
    assert namer.file_name("s", KeySide.sk, "ssz", NamingScheme.indexed) == "s_sk.ssz"
    assert namer.file_name("s", KeySide.sk, "ssz", NamingScheme.byte_derived) == "s-sk.ssz"


def test_byte_derived_needs_three_bytes():
    with pytest.raises(ValueError):
        namer.stem(0, NamingScheme.byte_derived, b"\x01\x02")
