import pytest
import yaml

from keygen.manifest import ManifestBuilder, dump_yaml
from keygen.models import KeyPair, NamingScheme


def _kp(index: int, pk: bytes) -> KeyPair:
    return KeyPair(index=index, public_key=pk, secret_key=b"s" + pk)


HEADER = {
    "key_scheme": "StubTargetSumLifetime32",
    "hash_function": "SHA256",
    "encoding": "TargetSum",
    "lifetime": 1 << 32,
    "log_num_active_epochs": 18,
    "num_active_epochs": 1 << 18,
    "num_validators": 2,
}


def test_indexed_entries_carry_index_hex_and_sk_file():
    b = ManifestBuilder(NamingScheme.indexed)
    b.add(_kp(0, b"\x01\x02"), "validator_0_sk.ssz")
    b.add(_kp(1, b"\xab\xcd"), "validator_1_sk.ssz")
    doc = b.build(HEADER, expected=2)
    assert doc["validators"] == [
        {"index": 0, "pubkey_hex": "0x0102", "privkey_file": "validator_0_sk.ssz"},
        {"index": 1, "pubkey_hex": "0xabcd", "privkey_file": "validator_1_sk.ssz"},
    ]
    assert list(doc)[:-1] == list(HEADER)


def test_byte_derived_entries_omit_index():
    b = ManifestBuilder(NamingScheme.byte_derived)
    b.add(_kp(0, b"\xaa\xbb\xcc\xdd"), "validator-aabbcc-bbccdd-sk.ssz")
    (entry,) = b.build()["validators"]
    assert "index" not in entry


def test_entries_follow_index_order_not_insertion_order():
    b = ManifestBuilder(NamingScheme.indexed)
    b.add(_kp(2, b"\x02"), "c")
    b.add(_kp(0, b"\x00"), "a")
    b.add(_kp(1, b"\x01"), "b")
    assert [e.privkey_file for e in b.entries] == ["a", "b", "c"]


def test_duplicate_index_rejected():
    b = ManifestBuilder(NamingScheme.indexed)
    b.add(_kp(0, b"\x00"), "a")
    with pytest.raises(ValueError, match="duplicate"):
        b.add(_kp(0, b"\x01"), "b")


def test_count_mismatch_rejected():
    b = ManifestBuilder(NamingScheme.indexed)
    b.add(_kp(0, b"\x00"), "a")
    with pytest.raises(ValueError, match="expected 2"):
        b.build(HEADER, expected=2)


def test_no_adds_after_build():
    b = ManifestBuilder(NamingScheme.indexed)
    b.build(expected=0)
    with pytest.raises(RuntimeError):
        b.add(_kp(0, b"\x00"), "a")


def test_yaml_round_trips_and_keeps_header_order():
    b = ManifestBuilder(NamingScheme.indexed)
    b.add(_kp(0, b"\x01\x02"), "validator_0_sk.ssz")
    b.add(_kp(1, b"\x03\x04"), "validator_1_sk.ssz")
    text = dump_yaml(b.build(HEADER, expected=2))
    assert text.startswith("key_scheme: StubTargetSumLifetime32\n")
    loaded = yaml.safe_load(text)
    assert loaded["lifetime"] == 4294967296
    assert loaded["validators"][1]["pubkey_hex"] == "0x0304"
