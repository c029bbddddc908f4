from __future__ import annotations
import os
import threading
from pathlib import Path
from typing import List, Optional

from core_config.constants import MANIFEST_FILENAME
from core_logging import get_logger, log_stage
from keygen.errors import ConfigError, IoError

logger = get_logger("keygen.writer")


class OutputDirectory:
    """
    Exclusive handle on the run's output directory.

    Every file is an independent write; there is no rollback, so a failed
    run may leave some files behind.
    """

    def __init__(self, path: os.PathLike[str] | str, *, manifest_name: str = MANIFEST_FILENAME) -> None:
        self.path = Path(path)
        self.manifest_name = manifest_name
        self.written: List[Path] = []
        self._lock = threading.Lock()
        self._acquired = False

    def __enter__(self) -> "OutputDirectory":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        log_stage(logger, "writer", "dir_released",
                  output_dir=str(self.path), files_written=len(self.written),
                  failed=exc_type is not None)
        self._acquired = False

    def acquire(self) -> "OutputDirectory":
        if self.path.exists() and not self.path.is_dir():
            raise ConfigError(f"output path {self.path} exists and is not a directory", where="writer.acquire")
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as exc:
            # a parent component is a regular file
            raise ConfigError(f"cannot create output directory {self.path}: {exc}", where="writer.acquire") from exc
        except OSError as exc:
            raise IoError(f"cannot create output directory {self.path}: {exc}", where="writer.acquire") from exc
        self._acquired = True
        log_stage(logger, "writer", "dir_acquired", output_dir=str(self.path))
        return self

    def _target(self, name: str) -> Path:
        if not self._acquired:
            raise RuntimeError("output directory not acquired")
        if not name or Path(name).name != name or name in (".", ".."):
            raise ValueError(f"not a plain file name: {name!r}")
        return self.path / name

    def write_blob(self, name: str, data: bytes) -> Path:
        target = self._target(name)
        with self._lock:
            try:
                with open(target, "wb") as fh:
                    fh.write(data)
            except OSError as exc:
                raise IoError(f"failed to write {target}: {exc}", where="writer.write") from exc
            self.written.append(target)
        return target

    def write_text(self, name: str, text: str) -> Path:
        return self.write_blob(name, text.encode("utf-8"))

    def write_manifest(self, text: str, name: Optional[str] = None) -> Path:
        return self.write_text(name or self.manifest_name, text)


__all__ = ["OutputDirectory"]
