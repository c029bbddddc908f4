from __future__ import annotations
from typing import Tuple

from core_config.constants import BYTE_DERIVED_AFFIX_LEN
from core_utils import affix_hex
from keygen.models import KeySide, NamingScheme

_SEPARATOR = {
    NamingScheme.indexed: "_",
    NamingScheme.byte_derived: "-",
}


def stem(index: int, naming: NamingScheme, public_key: bytes) -> str:
    """
    File stem for one key pair.

    Indexed stems depend on the index only; byte-derived stems on the public
    key only (first and last three bytes), so the secret-key file of a pair
    shares its public key's stem. Two keys with equal affixes get equal
    stems; nothing here disambiguates them.
    """
    if naming == NamingScheme.indexed:
        return f"validator_{index}"
    head, tail = affix_hex(public_key, BYTE_DERIVED_AFFIX_LEN)
    return f"validator-{head}-{tail}"


def file_name(stem_: str, side: KeySide, ext: str, naming: NamingScheme) -> str:
    return f"{stem_}{_SEPARATOR[naming]}{KeySide(side).value}.{ext}"


def pair_file_names(index: int, naming: NamingScheme, public_key: bytes, ext: str) -> Tuple[str, str]:
    """(public, secret) file names for one extension."""
    s = stem(index, naming, public_key)
    return file_name(s, KeySide.pk, ext, naming), file_name(s, KeySide.sk, ext, naming)


__all__ = ["stem", "file_name", "pair_file_names"]
