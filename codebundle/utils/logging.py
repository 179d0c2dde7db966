from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import math
import os
import platform
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from codebundle.utils.config import EVENTS_FILE, LOG_DIR_ENV


# --------------------------------------------
# JSON utilities (NaN/Inf safe + compact)
# --------------------------------------------


def _json_sanitize(v: Any) -> Any:
    """
    Convert values into JSON-safe primitives.

    Rules:
    - Finite floats are emitted as-is; NaN / ±Inf are stringified.
    - Paths are emitted as strings.
    - Containers are handled recursively; sets are sorted for stability.
    - Anything else that json.dumps can't handle is stringified.
    """
    if isinstance(v, float):
        if math.isfinite(v):
            return v
        if math.isnan(v):
            return "NaN"
        return "Infinity" if v > 0 else "-Infinity"

    if isinstance(v, Path):
        return v.as_posix()

    if isinstance(v, dict):
        return {str(k): _json_sanitize(val) for k, val in v.items()}
    if isinstance(v, (list, tuple)):
        return [_json_sanitize(x) for x in v]
    if isinstance(v, (set, frozenset)):
        return sorted(_json_sanitize(x) for x in v)

    try:
        json.dumps(v)
        return v
    except Exception:
        return str(v)


def _json_dump_line(obj: Dict[str, Any], ensure_ascii: bool = False) -> str:
    return json.dumps(_json_sanitize(obj), separators=(",", ":"), ensure_ascii=ensure_ascii)


_STDLIB_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


# --------------------------------------------
# JSONL Logger (append-only, thread-safe)
# --------------------------------------------


class JsonlLogger:
    """
    Minimal, robust JSONL event logger.

    - With an ``out_dir``, every event is appended to ``out_dir/events.jsonl``
      as a single JSON object ("ts", "level", "msg" plus structured k/v pairs).
    - Every event is also forwarded to the stdlib logger ``codebundle`` so the
      CLI's ``-v`` flag can surface it on stderr.
    - Never raises to callers (best-effort, I/O failures are swallowed).
    """

    def __init__(self, out_dir: Path | str | None = None):
        self.dir: Optional[Path] = Path(out_dir) if out_dir else None
        self.path: Optional[Path] = None
        self._lock = threading.Lock()
        self._stream: Optional[io.TextIOBase] = None
        self._std = logging.getLogger("codebundle")
        if self.dir is not None:
            try:
                self.dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                self._std.warning("Cannot create log directory %s: %s", self.dir, exc)
            self.path = self.dir / EVENTS_FILE
            self._open()

    # ----- context manager support -----
    def __enter__(self) -> "JsonlLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----- file handling -----
    def _open(self) -> None:
        if self.path is None:
            return
        try:
            self._stream = self.path.open("a", encoding="utf-8")
        except OSError:
            self._stream = None

    def close(self) -> None:
        try:
            if self._stream:
                try:
                    self._stream.flush()
                finally:
                    self._stream.close()
        except OSError:
            pass
        finally:
            self._stream = None

    # ------------- Core write -------------
    def _emit(self, level: str, msg: str, **fields: Any) -> None:
        if fields:
            self._std.log(_STDLIB_LEVELS.get(level, logging.INFO), "%s %s", msg, fields)
        else:
            self._std.log(_STDLIB_LEVELS.get(level, logging.INFO), "%s", msg)

        if self.path is None:
            return

        rec: Dict[str, Any] = {
            "ts": _dt.datetime.now(_dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": level,
            "msg": msg,
        }
        if fields:
            rec.update(fields)

        try:
            line = _json_dump_line(rec)
        except (TypeError, ValueError):
            line = json.dumps({str(k): str(v) for k, v in rec.items()}, ensure_ascii=False)

        with self._lock:
            try:
                if self._stream is None:
                    self._open()
                if self._stream:
                    try:
                        self._stream.write(line + "\n")
                    except UnicodeEncodeError:
                        # Lone surrogates (undecodable file names) only fit as escapes.
                        self._stream.write(_json_dump_line(rec, ensure_ascii=True) + "\n")
                    self._stream.flush()
            except Exception:
                # swallow any I/O or encoding errors; logging must never break the caller
                return

    # ------------- Public API (level helpers) -------------
    def info(self, msg: str, **fields: Any) -> None:
        self._emit("INFO", msg, **fields)

    def debug(self, msg: str, **fields: Any) -> None:
        self._emit("DEBUG", msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._emit("WARN", msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        """
        Log an error. If the caller passes exc_info=True, attach traceback text
        into a "trace" field but do not re-raise.
        """
        if fields.pop("exc_info", False):
            import traceback

            fields["trace"] = traceback.format_exc()
        self._emit("ERROR", msg, **fields)

    def phase_start(self, name: str, **fields: Any) -> None:
        self._emit("INFO", "Phase start", phase=name, **fields)

    def phase_end(self, name: str, **fields: Any) -> None:
        self._emit("INFO", "Phase end", phase=name, **fields)


def resolve_log_dir(cli_value: Optional[str]) -> Optional[Path]:
    """CLI flag first, then $CODEBUNDLE_LOG_DIR; None disables the events file."""
    value = cli_value or os.environ.get(LOG_DIR_ENV)
    return Path(value) if value else None


def configure_stderr_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def log_runtime_environment(logger: JsonlLogger, **extra: Any) -> None:
    v: Dict[str, Any] = {
        "python": sys.version.replace("\n", " "),
        "platform": platform.platform(),
        "executable": sys.executable,
    }
    v.update(extra)
    logger.info("Runtime environment.", **v)
