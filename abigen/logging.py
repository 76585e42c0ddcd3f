"""
abigen.logging
--------------

Structured logging for the generator pipeline and CLI:

- JSON or concise (optionally colored) text formats
- Context-local fields via `contextvars` (trace_id, contract, source, stage)
- Helpers to bind/unbind context fields and generate trace IDs

Usage
-----
    from abigen import logging as alog

    alog.configure(json=False, level="INFO")  # once, at CLI start
    log = alog.get_logger(__name__)

    with alog.trace_scope():
        alog.bind(contract="Erc20")
        log.info("tokenized abi", extra={"structs": 3, "enums": 1})

Environment
-----------
- ABIGEN_LOG_FORMAT=json|text   overrides the TTY-based default
- ABIGEN_LOG_LEVEL=DEBUG|INFO…  default of the CLI `--log-level` option

Only the standard library is used so the module is importable before any
configuration is loaded.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "configure",
    "get_logger",
    "bind",
    "unbind",
    "context",
    "clear_context",
    "trace_scope",
    "JSONFormatter",
    "TextFormatter",
]

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_ABIGEN_LOG_CONTEXT", default={})

DEFAULT_CONTEXT_KEYS = ("trace_id", "contract", "source", "stage")

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    )
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    """Merge fields into the active context."""
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def unbind(*keys: str) -> None:
    cur = dict(_LOG_CONTEXT.get())
    for k in keys:
        cur.pop(k, None)
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None, **fields: Any) -> Iterator[str]:
    """
    Ensure a trace_id (plus optional fields) for the duration of the scope.
    The previous context is restored on exit.
    """
    prev = dict(_LOG_CONTEXT.get())
    tid = trace_id or short_uuid()
    try:
        bind(trace_id=tid, **fields)
        yield tid
    finally:
        _LOG_CONTEXT.set(prev)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# ----------------------------
# Formatters
# ----------------------------


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, (tuple, set, frozenset)):
        return [_coerce_value(x) for x in v]
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RECORD_ATTRS
    }


def _supports_color(stream: Any) -> bool:
    try:
        return stream.isatty() and os.environ.get("NO_COLOR") is None
    except Exception:
        return False


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, default=str, separators=(",", ":"))


_LEVEL_COLOR = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1m\x1b[35m",
}
_RESET = "\x1b[0m"


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2025-01-05T12:34:56.789+00:00 | INFO  | abigen.pipeline | contract=Erc20 structs=3 | generated bindings
    """

    def __init__(self, stream: Any = None):
        super().__init__()
        self._color = _supports_color(stream) if stream is not None else False

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        fields = [f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None]
        fields += [f"{k}={v}" for k, v in _extras(record).items() if k not in ctx]

        lvl = f"{record.levelname:<5}"
        if self._color:
            lvl = f"{_LEVEL_COLOR.get(record.levelno, '')}{lvl}{_RESET}"

        line = f"{_utcnow_iso()} | {lvl} | {record.name}"
        if fields:
            line += " | " + " ".join(fields)
        line += f" | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


# ----------------------------
# Public setup API
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "INFO",
    stream: io.TextIOBase = sys.stderr,
) -> None:
    """
    Configure the `abigen` logger hierarchy.

    Parameters
    ----------
    json : bool | None
        If None, decided by ABIGEN_LOG_FORMAT and TTY detection (text on a TTY).
    level : str | int
        Minimum log level.
    stream : TextIO
        Stream for the console handler (default: stderr).
    """
    root = logging.getLogger("abigen")
    root.setLevel(_coerce_level(level))
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(_coerce_level(level))
    handler.setFormatter(JSONFormatter() if _decide_json(json, stream) else TextFormatter(stream))
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Standard logger under the `abigen` namespace."""
    if not name:
        return logging.getLogger("abigen")
    return logging.getLogger(name if name.startswith("abigen") else f"abigen.{name}")


# ----------------------------
# Internals
# ----------------------------


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _decide_json(json_flag: Optional[bool], stream: Any) -> bool:
    if json_flag is not None:
        return json_flag
    override = _env_json_override()
    if override is not None:
        return override
    return not _supports_color(stream)


def _env_json_override() -> Optional[bool]:
    env = os.environ.get("ABIGEN_LOG_FORMAT", "").strip().lower()
    if env == "json":
        return True
    if env == "text":
        return False
    return None
