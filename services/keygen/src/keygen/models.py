from __future__ import annotations
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from core_config.constants import JSON_EXT, SSZ_EXT


class ExportFormat(str, Enum):
    ssz = "ssz"
    both = "both"

    @property
    def extensions(self) -> Tuple[str, ...]:
        """File extensions written per key side, canonical binary first."""
        if self is ExportFormat.both:
            return (SSZ_EXT, JSON_EXT)
        return (SSZ_EXT,)


class NamingScheme(str, Enum):
    indexed = "indexed"
    byte_derived = "byte_derived"

    @classmethod
    def from_new_format(cls, new_format: bool) -> "NamingScheme":
        return cls.byte_derived if new_format else cls.indexed


class KeySide(str, Enum):
    pk = "pk"
    sk = "sk"


class KeyPair(BaseModel):
    """
    One generated key pair. ``public_key``/``secret_key`` hold the scheme's
    canonical bytes; the ``*_native`` objects are the backend's own key
    values, kept only for the legacy JSON projection.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    public_key: bytes = Field(min_length=1, repr=False)
    secret_key: bytes = Field(min_length=1, repr=False)
    public_native: Any = Field(default=None, repr=False, exclude=True)
    secret_native: Any = Field(default=None, repr=False, exclude=True)

    def canonical(self, side: KeySide) -> bytes:
        return self.public_key if side == KeySide.pk else self.secret_key

    def native(self, side: KeySide) -> Any:
        return self.public_native if side == KeySide.pk else self.secret_native


class ManifestEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Present only under indexed naming
    index: Optional[int] = Field(default=None, ge=0)
    pubkey_hex: str
    privkey_file: str

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


__all__ = ["ExportFormat", "NamingScheme", "KeySide", "KeyPair", "ManifestEntry"]
