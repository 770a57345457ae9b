"""
L4 Execution — Post-install verification.

Checks that each installed tool is on PATH and answers ``--version``
(or ``version``) with output matching the expected pattern.  A pattern
mismatch is a warning, a missing command a failure.  Every result is
appended to the run's verification log.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _version_output(exe: str, timeout: int) -> str:
    for flag in ("--version", "version"):
        try:
            result = subprocess.run(
                [exe, flag], capture_output=True, text=True, timeout=timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("%s %s failed: %s", exe, flag, e)
            continue
        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode == 0 and output.strip():
            return output
    return ""


def _append(log_path: Path | None, line: str) -> None:
    if log_path is None:
        return
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] {line}\n")
    except OSError as e:
        logger.warning("Cannot write verification log %s: %s", log_path, e)


def verify_installation(
    label: str,
    command: str,
    pattern: str,
    log_path: Path | None = None,
    *,
    path: str | None = None,
    timeout: int = 10,
) -> dict[str, Any]:
    """Verify one tool.

    Returns:
        ``{"component", "command", "status", "output"}`` where status is
        ``pass``, ``warn`` (output did not match) or ``fail`` (missing).
    """
    exe = shutil.which(command, path=path)
    if exe is None:
        logger.error("%s: command '%s' not found", label, command)
        _append(log_path, f"FAIL: {label} - command '{command}' not found")
        return {"component": label, "command": command, "status": "fail", "output": ""}

    output = _version_output(exe, timeout)
    first_line = output.strip().splitlines()[0] if output.strip() else ""

    if re.search(pattern, output):
        logger.info("%s verified: %s", label, first_line)
        _append(log_path, f"PASS: {label} - {first_line}")
        status = "pass"
    else:
        logger.warning("%s installed but version check failed", label)
        _append(log_path, f"WARN: {label} - unexpected version output: {first_line}")
        status = "warn"

    return {"component": label, "command": command, "status": status, "output": first_line}


def run_verification_suite(
    installed: Iterable[str],
    recipes: Mapping[str, dict],
    log_path: Path | None = None,
    *,
    path: str | None = None,
) -> dict[str, Any]:
    """Verify every installed component whose recipe declares a check.

    Returns:
        ``{"ok": bool, "passed": N, "warned": N, "failed": N,
        "results": [...], "log": "..."}``.
    """
    logger.info("Running installation verification suite...")
    _append(log_path, "Verification started")

    results = []
    for name in installed:
        recipe = recipes.get(name)
        if not recipe or "verify" not in recipe:
            continue
        command, pattern = recipe["verify"]
        result = verify_installation(
            recipe.get("label", name), command, pattern, log_path, path=path,
        )
        result["name"] = name
        results.append(result)

    counts = {status: sum(1 for r in results if r["status"] == status)
              for status in ("pass", "warn", "fail")}
    summary = (
        f"Verification complete: {counts['pass']} passed, "
        f"{counts['warn']} warnings, {counts['fail']} failed"
    )
    _append(log_path, summary)
    if counts["fail"]:
        logger.warning("%s", summary)
    else:
        logger.info("%s", summary)

    return {
        "ok": counts["fail"] == 0,
        "passed": counts["pass"],
        "warned": counts["warn"],
        "failed": counts["fail"],
        "results": results,
        "log": str(log_path) if log_path else None,
    }
