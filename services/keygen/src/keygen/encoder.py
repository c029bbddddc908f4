"""
Per-side byte blobs for a :class:`KeyPair`.

SSZ is the authoritative encoding. The JSON document exists for older
consumers only and is never compared against the SSZ bytes.
"""
from __future__ import annotations
from typing import Any, Dict

from core_config.constants import JSON_EXT, SSZ_EXT
from core_utils import hex_0x, jsonx
from keygen.models import ExportFormat, KeyPair, KeySide


def encode_ssz(key_pair: KeyPair, side: KeySide) -> bytes:
    """Canonical bytes exactly as the scheme produced them."""
    return key_pair.canonical(side)


def _legacy_document(key_pair: KeyPair, side: KeySide) -> Any:
    native = key_pair.native(side)
    if native is not None and not isinstance(native, (bytes, bytearray, memoryview)):
        projected = jsonx.to_jsonable(native)
        if isinstance(projected, (dict, list)):
            return projected
    # Opaque key: fall back to the hex of its canonical bytes
    return {"ssz": hex_0x(key_pair.canonical(side))}


def encode_json(key_pair: KeyPair, side: KeySide) -> str:
    return jsonx.dumps(_legacy_document(key_pair, side), pretty=True, sort_keys=False)


def encode(key_pair: KeyPair, side: KeySide, fmt: ExportFormat) -> Dict[str, bytes]:
    """Blobs to write for one side, keyed by file extension (SSZ first)."""
    blobs: Dict[str, bytes] = {SSZ_EXT: encode_ssz(key_pair, side)}
    if JSON_EXT in fmt.extensions:
        blobs[JSON_EXT] = encode_json(key_pair, side).encode("utf-8")
    return blobs


__all__ = ["encode_ssz", "encode_json", "encode"]
