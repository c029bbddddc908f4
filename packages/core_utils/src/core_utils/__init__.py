from .fingerprints import *
from . import jsonx

__all__ = [
    "canonical_json", "sha256_hex", "ensure_sha256_prefix",
    "hex_0x", "affix_hex", "pubkeys_fp",
    "jsonx",
]
