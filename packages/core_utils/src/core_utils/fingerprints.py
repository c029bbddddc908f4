import hashlib
import orjson
from typing import Any, Iterable, Tuple, Union

# ensure fully stable encoding: sort keys + drop microseconds
_OPTS = orjson.OPT_SORT_KEYS | orjson.OPT_OMIT_MICROSECONDS

# Public API of this module
__all__ = [
    "canonical_json",
    "sha256_hex",
    "ensure_sha256_prefix",
    "hex_0x",
    "affix_hex",
    "pubkeys_fp",
]

# ── Canonical JSON ─────────────────────────────────────────────────────────
def canonical_json(obj: Any) -> bytes:
    """
    Serialize `obj` to canonical JSON bytes:
    - keys sorted
    - no microseconds in timestamps
    - compact representation
    """
    return orjson.dumps(obj, option=_OPTS)

# ── Core helpers (hashing & hex) ─────────────────────────────────────────────
def _as_bytes(data: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, bytes):
        return data
    raise TypeError(f"expected str or bytes-like, got {type(data).__name__}")

def sha256_hex(data: Union[str, bytes, bytearray, memoryview]) -> str:
    """Return hex SHA-256 digest. Accepts str and bytes-like; strings are UTF-8 encoded."""
    return hashlib.sha256(_as_bytes(data)).hexdigest()

def ensure_sha256_prefix(value: str) -> str:
    """Ensure the fingerprint string has the ``sha256:`` prefix without recomputation."""
    if isinstance(value, str) and value.startswith("sha256:"):
        return value
    return "sha256:" + value

def hex_0x(data: Union[bytes, bytearray, memoryview]) -> str:
    """Lowercase hex with a ``0x`` prefix."""
    if isinstance(data, str):
        raise TypeError("hex_0x expects bytes-like, got str")
    return "0x" + _as_bytes(data).hex()

def affix_hex(data: Union[bytes, bytearray, memoryview], n: int) -> Tuple[str, str]:
    """
    Hex of the first *n* and last *n* bytes of *data* (no prefix).
    Raises ValueError when *data* is shorter than *n* bytes.
    """
    b = _as_bytes(data)
    if n <= 0:
        raise ValueError("affix length must be positive")
    if len(b) < n:
        raise ValueError(f"need at least {n} bytes, got {len(b)}")
    return b[:n].hex(), b[-n:].hex()

def pubkeys_fp(pubkeys: Iterable[Union[bytes, bytearray, memoryview]]) -> str:
    """Deterministic fingerprint over an *ordered* batch of public keys.

    Hash is over canonical JSON of ``{"pubkeys": [<0x-hex>, ...]}`` in the
    given order. Returns a ``sha256:<hex>`` string.
    """
    payload = {"pubkeys": [hex_0x(pk) for pk in pubkeys]}
    return ensure_sha256_prefix(sha256_hex(canonical_json(payload)))
