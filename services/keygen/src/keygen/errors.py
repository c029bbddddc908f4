from __future__ import annotations
from core_logging.error_codes import ErrorCode, EXIT_CODES


class KeygenError(RuntimeError):
    """Base for every error that aborts a key export run."""

    code: ErrorCode = ErrorCode.internal

    def __init__(self, message: str, *, where: str | None = None) -> None:
        super().__init__(message)
        self.where = where or "keygen"

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.code]


class ConfigError(KeygenError):
    """Invalid flags or settings, or an output path that is not a directory."""

    code = ErrorCode.config_invalid


class SchemeError(KeygenError):
    """The signature scheme backend failed to generate or encode a key."""

    code = ErrorCode.scheme_failure


class IoError(KeygenError):
    """Creating the output directory or writing a file failed."""

    code = ErrorCode.io_failure


__all__ = ["KeygenError", "ConfigError", "SchemeError", "IoError"]
