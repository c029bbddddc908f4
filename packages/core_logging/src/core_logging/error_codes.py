from enum import Enum

class ErrorCode(str, Enum):
    """
    Canonical error codes reported by the key export pipeline.
    Each maps to one process exit status (see ``EXIT_CODES``).
    """
    config_invalid   = "config_invalid"
    scheme_failure   = "scheme_failure"
    io_failure       = "io_failure"
    internal         = "internal"

EXIT_CODES = {
    ErrorCode.config_invalid: 2,
    ErrorCode.scheme_failure: 3,
    ErrorCode.io_failure: 4,
    ErrorCode.internal: 1,
}

__all__ = ["ErrorCode", "EXIT_CODES"]
