"""
Thin boundary to the hash-based signature library.

The pipeline only ever needs two things from a scheme: a fresh key pair for a
lifetime, and the canonical (SSZ) bytes of either half. Backends implement
:class:`KeyScheme`; :class:`KeySchemeAdapter` turns their output into
:class:`~keygen.models.KeyPair` values and maps every backend failure to
:class:`~keygen.errors.SchemeError`.
"""
from __future__ import annotations
import importlib
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

from core_config.constants import ACTIVATION_EPOCH, MAX_LOG_LIFETIME
from core_logging import get_logger, log_once_process
from keygen.errors import ConfigError, SchemeError
from keygen.models import KeyPair, KeySide

logger = get_logger("keygen.scheme")


@runtime_checkable
class KeyScheme(Protocol):
    name: str
    hash_function: str
    encoding: str
    log_lifetime: int

    def key_gen(self, activation_epoch: int, num_active_epochs: int) -> Tuple[Any, Any]: ...

    def to_canonical_bytes(self, key: Any) -> bytes: ...


class LeanSpecScheme:
    """Top-level target-sum XMSS (Poseidon2, lifetime 2^32) from ``lean_spec``."""

    name = "SIGTopLevelTargetSumLifetime32Dim64Base8"
    hash_function = "Poseidon2"
    encoding = "TargetSum"
    log_lifetime = MAX_LOG_LIFETIME

    def __init__(self) -> None:
        try:
            from lean_spec.subspecs.xmss.interface import DEFAULT_SIGNATURE_SCHEME  # type: ignore
        except ImportError as exc:
            raise SchemeError(
                "lean_spec is not installed; install the 'lean' extra or point "
                "KEYGEN_SCHEME at another backend",
                where="scheme.load",
            ) from exc
        self._scheme = DEFAULT_SIGNATURE_SCHEME
        cfg = getattr(self._scheme, "config", None)
        self.log_lifetime = int(getattr(cfg, "LOG_LIFETIME", MAX_LOG_LIFETIME))

    def key_gen(self, activation_epoch: int, num_active_epochs: int) -> Tuple[Any, Any]:
        return self._scheme.key_gen(activation_epoch, num_active_epochs)

    def to_canonical_bytes(self, key: Any) -> bytes:
        # SSZ containers expose encode_bytes(); older key types take the config.
        encode = getattr(key, "encode_bytes", None)
        if callable(encode):
            return encode()
        return key.to_bytes(self._scheme.config)


def load_scheme(path: str) -> KeyScheme:
    """
    Resolve ``"package.module:attribute"`` to a scheme backend. Classes and
    zero-argument factories are called; anything else is used as-is.
    """
    module_name, sep, attr = (path or "").partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"scheme must look like 'module:attribute', got {path!r}", where="scheme.load")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"cannot import scheme module {module_name!r}: {exc}", where="scheme.load") from exc
    try:
        target = getattr(module, attr)
    except AttributeError as exc:
        raise ConfigError(f"module {module_name!r} has no attribute {attr!r}", where="scheme.load") from exc

    if isinstance(target, type) or (callable(target) and not isinstance(target, KeyScheme)):
        try:
            target = target()
        except SchemeError:
            raise
        except Exception as exc:
            raise SchemeError(f"scheme backend {path!r} failed to initialise: {exc}", where="scheme.load") from exc

    if not isinstance(target, KeyScheme):
        raise ConfigError(f"{path!r} does not provide key_gen/to_canonical_bytes", where="scheme.load")
    log_once_process(logger, f"scheme:{path}", event="scheme_loaded", stage="keygen",
                     scheme_path=path, key_scheme=target.name)
    return target


class KeySchemeAdapter:
    """Generate :class:`KeyPair` values from a :class:`KeyScheme` backend."""

    def __init__(self, scheme: KeyScheme) -> None:
        self._scheme = scheme
        self._lengths: Dict[KeySide, Optional[int]] = {
            KeySide.pk: getattr(scheme, "public_key_len", None),
            KeySide.sk: getattr(scheme, "secret_key_len", None),
        }

    @property
    def scheme(self) -> KeyScheme:
        return self._scheme

    @property
    def log_lifetime(self) -> int:
        return int(self._scheme.log_lifetime)

    def describe(self) -> Dict[str, Any]:
        """Scheme metadata for the manifest header."""
        return {
            "key_scheme": self._scheme.name,
            "hash_function": self._scheme.hash_function,
            "encoding": self._scheme.encoding,
            "lifetime": 1 << self.log_lifetime,
        }

    def generate(self, index: int, log_num_active_epochs: int) -> KeyPair:
        num_active_epochs = 1 << log_num_active_epochs
        try:
            pk, sk = self._scheme.key_gen(ACTIVATION_EPOCH, num_active_epochs)
        except SchemeError:
            raise
        except Exception as exc:
            raise SchemeError(f"key generation failed for validator {index}: {exc}", where="scheme.generate") from exc
        return KeyPair(
            index=index,
            public_key=self.to_canonical_bytes(pk, KeySide.pk),
            secret_key=self.to_canonical_bytes(sk, KeySide.sk),
            public_native=pk,
            secret_native=sk,
        )

    def to_canonical_bytes(self, key: Any, side: KeySide) -> bytes:
        try:
            raw = self._scheme.to_canonical_bytes(key)
        except SchemeError:
            raise
        except Exception as exc:
            raise SchemeError(f"cannot encode {side.value} key: {exc}", where="scheme.encode") from exc
        if not isinstance(raw, (bytes, bytearray, memoryview)):
            raise SchemeError(
                f"scheme returned {type(raw).__name__} for {side.value} key, expected bytes",
                where="scheme.encode",
            )
        data = bytes(raw)
        if not data:
            raise SchemeError(f"scheme returned an empty {side.value} key", where="scheme.encode")
        expected = self._lengths[side]
        if expected is not None and len(data) != expected:
            raise SchemeError(
                f"{side.value} key is {len(data)} bytes, scheme declares {expected}",
                where="scheme.encode",
            )
        return data


__all__ = ["KeyScheme", "LeanSpecScheme", "KeySchemeAdapter", "load_scheme"]
