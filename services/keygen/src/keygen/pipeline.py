from __future__ import annotations
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core_config.constants import MANIFEST_FILENAME, MAX_LOG_LIFETIME, SSZ_EXT
from core_logging import get_logger, log_stage
from core_utils import pubkeys_fp
from keygen import encoder, namer
from keygen.errors import ConfigError, SchemeError
from keygen.manifest import ManifestBuilder, dump_yaml
from keygen.models import ExportFormat, KeyPair, KeySide, NamingScheme
from keygen.scheme import KeySchemeAdapter
from keygen.writer import OutputDirectory

logger = get_logger("keygen.pipeline")


class ExportOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    num_validators: int = Field(ge=0)
    log_num_active_epochs: int = Field(ge=0, le=MAX_LOG_LIFETIME)
    output_dir: Path
    export_format: ExportFormat = ExportFormat.both
    create_manifest: bool = True
    naming: NamingScheme = NamingScheme.indexed
    manifest_name: str = MANIFEST_FILENAME


class ExportResult(BaseModel):
    num_keys: int
    written: List[Path] = Field(default_factory=list)
    manifest: Optional[Dict[str, Any]] = None
    manifest_path: Optional[Path] = None


def _write_key(out: OutputDirectory, key_pair: KeyPair, options: ExportOptions) -> str:
    """Write every requested encoding of both halves; return the secret-key SSZ file name."""
    sk_ssz_name = ""
    for side in (KeySide.pk, KeySide.sk):
        blobs = encoder.encode(key_pair, side, options.export_format)
        for ext, data in blobs.items():
            pk_name, sk_name = namer.pair_file_names(key_pair.index, options.naming, key_pair.public_key, ext)
            name = pk_name if side == KeySide.pk else sk_name
            out.write_blob(name, data)
            if side == KeySide.sk and ext == SSZ_EXT:
                sk_ssz_name = name
    return sk_ssz_name


def run_export(
    options: ExportOptions,
    adapter: KeySchemeAdapter,
    *,
    progress: Optional[Callable[[int], None]] = None,
) -> ExportResult:
    """
    Generate ``options.num_validators`` key pairs in index order and persist
    them under ``options.output_dir``.

    The output directory is acquired before the first key is generated. The
    manifest, when enabled, is written only after every key is on disk.
    """
    if options.log_num_active_epochs > adapter.log_lifetime:
        raise ConfigError(
            f"log-num-active-epochs {options.log_num_active_epochs} exceeds the scheme lifetime "
            f"2^{adapter.log_lifetime}",
            where="pipeline.validate",
        )

    header: Dict[str, Any] = {
        **adapter.describe(),
        "log_num_active_epochs": options.log_num_active_epochs,
        "num_active_epochs": 1 << options.log_num_active_epochs,
        "num_validators": options.num_validators,
    }
    builder = ManifestBuilder(options.naming)
    seen_stems: Dict[str, int] = {}
    pubkeys: List[bytes] = []

    with OutputDirectory(options.output_dir, manifest_name=options.manifest_name) as out:
        log_stage(logger, "keygen", "run_start",
                  output_dir=str(options.output_dir), key_scheme=header["key_scheme"],
                  export_format=options.export_format.value, naming=options.naming.value,
                  num_validators=options.num_validators,
                  log_num_active_epochs=options.log_num_active_epochs)

        for index in range(options.num_validators):
            if progress is not None:
                progress(index)
            t0 = time.perf_counter()
            key_pair = adapter.generate(index, options.log_num_active_epochs)
            log_stage(logger, "keygen", "key_generated", index=index,
                      latency_ms=(time.perf_counter() - t0) * 1000,
                      pk_len=len(key_pair.public_key), sk_len=len(key_pair.secret_key))

            try:
                stem = namer.stem(index, options.naming, key_pair.public_key)
            except ValueError as exc:
                raise SchemeError(f"cannot name validator {index}: {exc}", where="pipeline.name") from exc
            if stem in seen_stems:
                log_stage(logger, "keygen", "name_collision", level="WARNING",
                          index=index, stem=stem, previous_index=seen_stems[stem])
            seen_stems[stem] = index

            privkey_file = _write_key(out, key_pair, options)
            log_stage(logger, "keygen", "key_written", index=index, stem=stem)

            if options.create_manifest:
                builder.add(key_pair, privkey_file)
            pubkeys.append(key_pair.public_key)

        document: Optional[Dict[str, Any]] = None
        manifest_path: Optional[Path] = None
        if options.create_manifest:
            document = builder.build(header, expected=options.num_validators)
            manifest_path = out.write_manifest(dump_yaml(document))
            log_stage(logger, "keygen", "manifest_written",
                      path=str(manifest_path), entries=len(document["validators"]))

        log_stage(logger, "keygen", "run_complete",
                  num_keys=options.num_validators, files_written=len(out.written),
                  pubkeys_fp=pubkeys_fp(pubkeys))

        return ExportResult(
            num_keys=options.num_validators,
            written=list(out.written),
            manifest=document,
            manifest_path=manifest_path,
        )


__all__ = ["ExportOptions", "ExportResult", "run_export"]
