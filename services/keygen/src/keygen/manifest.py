from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

import yaml

from core_utils import hex_0x
from keygen.models import KeyPair, ManifestEntry, NamingScheme


class ManifestBuilder:
    """
    Collects one :class:`ManifestEntry` per key and renders the manifest
    document once every key has been processed.

    Entries are slotted by key index, so the document follows generation
    order even if keys are added out of order.
    """

    def __init__(self, naming: NamingScheme) -> None:
        self._naming = NamingScheme(naming)
        self._entries: Dict[int, ManifestEntry] = {}
        self._built = False

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, key_pair: KeyPair, privkey_file: str) -> ManifestEntry:
        if self._built:
            raise RuntimeError("manifest already built")
        if key_pair.index in self._entries:
            raise ValueError(f"duplicate manifest entry for validator {key_pair.index}")
        entry = ManifestEntry(
            index=key_pair.index if self._naming == NamingScheme.indexed else None,
            pubkey_hex=hex_0x(key_pair.public_key),
            privkey_file=privkey_file,
        )
        self._entries[key_pair.index] = entry
        return entry

    @property
    def entries(self) -> List[ManifestEntry]:
        return [self._entries[i] for i in sorted(self._entries)]

    def build(self, header: Optional[Mapping[str, Any]] = None, *, expected: Optional[int] = None) -> Dict[str, Any]:
        if expected is not None and len(self._entries) != expected:
            raise ValueError(f"manifest has {len(self._entries)} entries, expected {expected}")
        self._built = True
        return {
            **dict(header or {}),
            "validators": [e.to_document() for e in self.entries],
        }


def dump_yaml(document: Mapping[str, Any]) -> str:
    return yaml.safe_dump(dict(document), sort_keys=False, default_flow_style=False)


__all__ = ["ManifestBuilder", "dump_yaml"]
