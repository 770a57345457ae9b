"""
Logging configuration for devsetup runs.

Two sinks:

- the console (stderr), set up once by ``main.cli`` from ``-v`` / ``-q`` /
  ``--debug`` or ``DEVSETUP_LOG_LEVEL``.  Progress lines and the summary
  go to stdout through click, so ``install --json`` stays parseable.
- a timestamped per-run file under the log directory
  (``setup_YYYYmmdd_HHMMSS.log``, ``verification_...``), attached by the
  install command for the duration of the run and always at INFO or
  lower so the file keeps what a quiet console hides.

``DEVSETUP_LOG_FILE`` / ``DEVSETUP_LOG_FILE_LEVEL`` add a persistent file
on top of that, for debugging across runs.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: "[WARNING] Low disk space ..."
_FMT_MINIMAL = "[%(levelname)s] %(message)s"

# INFO: what the installers are doing, with a clock
_FMT_VERBOSE = "%(asctime)s [%(levelname)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG: logger name and line for every record
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# Run log and DEVSETUP_LOG_FILE
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for one devsetup process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to WARNING.
        log_file: Optional persistent log file.
        log_file_level: Level for ``log_file``; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    # Root passes the lowest of the handler levels
    effective_level = numeric_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        root.addHandler(_file_handler(Path(log_file), file_level))
    root.setLevel(effective_level)

    # A broken log file must not abort an install
    logging.raiseExceptions = False


def run_log_path(log_dir: Path, kind: str = "setup") -> Path:
    """``<log_dir>/<kind>_YYYYmmdd_HHMMSS.log`` for the current run."""
    return log_dir / f"{kind}_{time.strftime('%Y%m%d_%H%M%S')}.log"


def add_run_log_file(path: Path, level: str = "INFO") -> logging.Handler:
    """Attach the per-run log file to the root logger.

    The root level is lowered if needed so that records at ``level``
    reach the file even when the console is quieter.

    Returns:
        The handler; pass it to ``remove_run_log_file`` when the run ends.
    """
    numeric_level = _parse_level(level)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = _file_handler(path, numeric_level)

    root = logging.getLogger()
    root.addHandler(handler)
    if root.level > numeric_level:
        # Console handler keeps its own level
        root.setLevel(numeric_level)
    return handler


def remove_run_log_file(handler: logging.Handler) -> None:
    """Detach and close a handler from ``add_run_log_file``."""
    logging.getLogger().removeHandler(handler)
    handler.close()


def _file_handler(path: Path, level: int) -> logging.Handler:
    fh = logging.FileHandler(path, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return fh


def _parse_level(level: str | None) -> int:
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
