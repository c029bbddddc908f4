from .logger import (
    get_logger,
    log_stage,
    bind_run_id,
    current_run_id,
    log_once_process,
    emit_run_summary,
    record_error,
    reset_run,
)

__all__ = [
    "get_logger",
    "log_stage",
    "bind_run_id",
    "current_run_id",
    "log_once_process",
    "emit_run_summary",
    "record_error",
    "reset_run",
]
