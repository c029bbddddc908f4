import logging, sys, orjson, os
from typing import Any, Optional, Dict, Iterable
import time
import contextvars

# ────────────────────────────────────────────────────────────
# Run-level aggregation & summary emission
# ────────────────────────────────────────────────────────────
class _RunAgg:
    __slots__ = ("events", "timers", "last", "errors")
    def __init__(self) -> None:
        self.events: dict[str, dict[str, int]] = {}
        self.timers: dict[str, list[float]] = {}
        self.last: dict[str, Any] = {}
        self.errors: list[dict[str, Any]] = []

_RUN_AGG: contextvars.ContextVar[Optional[_RunAgg]] = contextvars.ContextVar("RUN_AGG", default=None)
_RUN_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("RUN_ID", default=None)

# Fields copied into the run summary when a stage log carries them
_SUMMARY_FIELDS = ("run_id", "output_dir", "key_scheme", "export_format", "naming")

def _run_agg() -> _RunAgg:
    agg = _RUN_AGG.get()
    if agg is None:
        agg = _RunAgg()
        _RUN_AGG.set(agg)
    return agg

def reset_run() -> None:
    """Drop any aggregated events; the next log call starts a fresh run."""
    _RUN_AGG.set(None)

def _counts_as_error(event: str, level: int, extras: Dict[str, Any]) -> bool:
    # Warnings (e.g. name collisions) are not errors
    if level >= logging.ERROR or "error" in extras:
        return True
    ev = (event or "").lower()
    return any(k in ev for k in ("error", "failed", "exception"))

def _latencies(extras: Dict[str, Any]) -> Iterable[float]:
    v = extras.get("latency_ms")
    if isinstance(v, (int, float)):
        yield float(v)

def _note(stage: str, event: str, level: int, extras: Dict[str, Any]) -> None:
    agg = _run_agg()
    per_stage = agg.events.setdefault(stage, {})
    per_stage[event] = per_stage.get(event, 0) + 1
    for v in _latencies(extras):
        agg.timers.setdefault(stage, []).append(v)
    for k in _SUMMARY_FIELDS:
        v = extras.get(k)
        if isinstance(v, str) and v:
            agg.last[k] = v
    if _counts_as_error(event, level, extras):
        agg.errors.append({"stage": stage, "event": event})

def _timer_stats(vals: list[float]) -> Dict[str, Any]:
    srt = sorted(vals)
    n = len(srt)
    return {
        "count": n,
        "sum_ms": round(sum(srt), 3),
        "p50_ms": round(srt[int(0.5 * (n - 1))], 3),
        "p95_ms": round(srt[int(0.95 * (n - 1))], 3),
        "max_ms": round(srt[-1], 3),
    }

def emit_run_summary(logger: logging.Logger, *, service: Optional[str] = None) -> None:
    """Emit one ``run_summary`` line for the current run and reset the aggregator."""
    agg = _RUN_AGG.get()
    if not agg:
        return
    payload = {
        "stage": "summary",
        "service": service or os.getenv("SERVICE_NAME") or logger.name,
        "counts": {k: sum(v.values()) for k, v in agg.events.items()},
        "events": agg.events,
        "timers": {stage: _timer_stats(vals) for stage, vals in agg.timers.items() if vals},
        **agg.last,
        "error_count": len(agg.errors),
    }
    rid = current_run_id()
    if rid and not payload.get("run_id"):
        payload["run_id"] = rid
    logger.info("run_summary", extra=_sanitize_extra(payload))
    _RUN_AGG.set(None)

def record_error(
    code: str,
    *,
    where: str,
    message: str,
    logger: logging.Logger,
    level: str = "ERROR",
    **extras: Any,
) -> None:
    """One normalized ``error`` line; also counted in the run summary."""
    _run_agg().errors.append({"code": str(code), "where": str(where), "message": str(message)})
    payload = {
        "stage": extras.pop("stage", None) or "error",
        "error_code": str(code),
        "error_message": message,
        "where": where,
        **extras,
    }
    logger.log(getattr(logging, level.upper(), logging.ERROR), "error", extra=_sanitize_extra(payload))

# ────────────────────────────────────────────────────────────
# Run id binding
# ────────────────────────────────────────────────────────────
def bind_run_id(run_id: Optional[str]) -> None:
    _RUN_ID.set(run_id)

def current_run_id() -> Optional[str]:
    return _RUN_ID.get()


class _RunIdFilter(logging.Filter):
    """Stamp the bound run_id onto records that do not carry one."""
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "run_id", None) is None:
            rid = _RUN_ID.get()
            if rid:
                record.run_id = rid
        return True

# LogRecord attributes that extras must not overwrite
_RESERVED: set[str] = {
    "name","msg","args","levelname","levelno",
    "pathname","filename","module","exc_info","exc_text","stack_info",
    "lineno","funcName","created","msecs","relativeCreated",
    "thread","threadName","processName","process","message","asctime",
    "taskName",
}

# Top-level fields of the log envelope; everything else goes under ``meta``
_TOP_LEVEL: set[str] = {
    "ts", "level", "service", "stage", "latency_ms",
    "run_id", "index", "error_code", "message",
}

def _default(obj):
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, os.PathLike):
        return os.fspath(obj)
    raise TypeError

class JsonFormatter(logging.Formatter):
    """One JSON object per line: envelope fields at the top, the rest under ``meta``."""

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "service": os.getenv("SERVICE_NAME", record.name),
            "event": record.getMessage(),
        }
        meta: Dict[str, Any] = {}
        for key, val in record.__dict__.items():
            if key in _RESERVED:
                continue
            (base if key in _TOP_LEVEL else meta)[key] = val

        if "message_extra" in meta:
            base["message"] = meta.pop("message_extra")
        if record.exc_info:
            meta["exc"] = self.formatException(record.exc_info)
        if meta:
            base["meta"] = meta
        return orjson.dumps(base, default=_default).decode("utf-8")

class StructuredLogger(logging.Logger):
    """
    `logging.Logger` that also takes keyword fields
    (``logger.info("run_start", stage="keygen")``) and merges them into ``extra``.
    """

    def _log(                                   # noqa: PLR0913 – keep signature
        self,
        level: int,
        msg: str,
        args,
        exc_info=None,
        extra: Dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **kwargs: Any,
    ) -> None:
        if kwargs:
            extra = {**(extra or {}), **kwargs}
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=_sanitize_extra(extra),
            stack_info=stack_info,
            stacklevel=stacklevel,
        )


class DynamicStdoutHandler(logging.StreamHandler):
    """
    Writes to whatever `sys.stdout` is at emit time, so output redirected
    after the logger was built is still captured.
    """

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        # Swap without setStream(): that flushes the old stream, which may be closed.
        if self.stream is not sys.stdout:
            self.stream = sys.stdout
        super().emit(record)


logging.setLoggerClass(StructuredLogger)


def get_logger(name: str = "keygen", level: str | None = None) -> logging.Logger:
    """
    Service roots (no dot in *name*) own the JSON handler and the level.
    Module loggers (``keygen.writer``) get no handler and stay at NOTSET
    unless *level* is given, so they follow their root.
    """
    logger = logging.getLogger(name)
    if "." not in name:
        if not logger.handlers:
            handler = DynamicStdoutHandler()
            handler.setFormatter(JsonFormatter())
            logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(level or os.getenv("SERVICE_LOG_LEVEL", "INFO"))
    else:
        for h in list(logger.handlers):
            logger.removeHandler(h)
        logger.propagate = True
        logger.setLevel(level or logging.NOTSET)

    if not any(isinstance(f, _RunIdFilter) for f in logger.filters):
        logger.addFilter(_RunIdFilter())
    return logger

def log_stage(logger: logging.Logger, stage: str, event: str, **fields: Any) -> None:
    """
    ``log_stage(logger, "keygen", "key_written", index=3)``: one stage event,
    counted in the run summary. ``level=`` (name or number) overrides INFO.
    """
    level = fields.pop("level", logging.INFO)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    payload = {"stage": stage, **fields}
    _note(stage, event, level, payload)
    logger.log(level, event, extra=_sanitize_extra(payload))

def _sanitize_extra(extra: Dict[str, Any] | None) -> Dict[str, Any]:
    """
    Rename keys that would collide with LogRecord attributes:
    ``message`` becomes ``message_extra``, anything else ``meta_<key>``.
    """
    if not extra:
        return {}
    safe: Dict[str, Any] = {}
    for k, v in extra.items():
        key = str(k)
        if key == "message":
            safe["message_extra"] = v
        elif key in _RESERVED:
            safe[f"meta_{key}"] = v
        else:
            safe[key] = v
    return safe

# ────────────────────────────────────────────────────────────
# log_once_process – one line per key for the process lifetime
# ────────────────────────────────────────────────────────────
_ONCE_KEYS: set[str] = set()
def log_once_process(logger: logging.Logger, key: str, *, level: int = logging.INFO, event: str, **kwargs: Any) -> None:
    """Emit *event* only the first time *key* is seen (e.g. which scheme backend loaded)."""
    if key in _ONCE_KEYS:
        return
    _ONCE_KEYS.add(key)
    logger.log(level, event, extra=_sanitize_extra(kwargs))
