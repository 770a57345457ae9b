"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for install
operations.  Dry-run handling, run-as-user, logging and the
critical / non-critical distinction are centralised here.

A non-critical step that fails is logged as a warning and recorded in
``CommandRunner.warnings``; the caller carries on.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 2000


class CommandRunner:
    """Runs install commands, or logs them in dry-run mode.

    Args:
        dry_run: Log instead of executing.
        run_as: Account used for ``as_user=True`` steps.  Ignored unless
            the process runs as root and ``run_as`` is someone else.
        default_timeout: Seconds before ``TimeoutExpired``.
    """

    def __init__(
        self,
        *,
        dry_run: bool = False,
        run_as: str | None = None,
        default_timeout: int = 1800,
    ):
        self.dry_run = dry_run
        self.run_as = run_as
        self.default_timeout = default_timeout
        self.warnings: list[str] = []

    def run(
        self,
        cmd: list[str],
        *,
        critical: bool = True,
        has_fallback: bool = False,
        as_user: bool = False,
        timeout: int | None = None,
        env_overrides: dict[str, str] | None = None,
        cwd: str | None = None,
    ) -> dict[str, Any]:
        """Run a command.

        A non-critical failure lands in ``warnings`` unless ``has_fallback``
        says the caller will retry another way; then it is only logged.

        Returns:
            ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
            ``{"ok": False, "error": "...", "critical": bool, ...}`` on
            failure.  Dry-run returns ``{"ok": True, "dry_run": True}``.
        """
        cmd = self._wrap_user(cmd) if as_user else list(cmd)
        printable = shlex.join(cmd)

        if self.dry_run:
            logger.info("[dry-run] Would run: %s", printable)
            return {"ok": True, "dry_run": True, "stdout": "", "elapsed_ms": 0}

        logger.debug("Running: %s", printable)
        result = self._execute(cmd, timeout or self.default_timeout, env_overrides, cwd)
        result["critical"] = critical

        if not result["ok"]:
            detail = result.get("stderr") or result["error"]
            if critical:
                logger.error("Command failed: %s — %s", printable, detail)
            elif has_fallback:
                logger.info("Command failed, trying fallback: %s — %s", printable, detail)
            else:
                message = f"Non-critical step failed: {printable} ({result['error']})"
                logger.warning("%s", message)
                self.warnings.append(message)
        return result

    def query(self, cmd: list[str], timeout: int = 10) -> dict[str, Any]:
        """Run a read-only command, even in dry-run mode."""
        return self._execute(list(cmd), timeout, None, None)

    def _wrap_user(self, cmd: list[str]) -> list[str]:
        if not self.run_as or os.geteuid() != 0 or self.run_as == "root":
            return list(cmd)
        return ["sudo", "-u", self.run_as, "-H", *cmd]

    @staticmethod
    def _execute(
        cmd: list[str],
        timeout: int,
        env_overrides: dict[str, str] | None,
        cwd: str | None,
    ) -> dict[str, Any]:
        env = os.environ.copy()
        env.setdefault("DEBIAN_FRONTEND", "noninteractive")
        if env_overrides:
            for key, value in env_overrides.items():
                env[key] = os.path.expandvars(value)

        start = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired:
            return {"ok": False, "error": f"Command timed out ({timeout}s)"}
        except OSError as e:
            return {"ok": False, "error": str(e)}

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = proc.stdout[-_OUTPUT_TAIL:] if proc.stdout else ""
        stderr = proc.stderr[-_OUTPUT_TAIL:] if proc.stderr else ""

        if proc.returncode == 0:
            return {"ok": True, "stdout": stdout, "stderr": stderr, "elapsed_ms": elapsed_ms}

        return {
            "ok": False,
            "error": f"Command failed (exit {proc.returncode})",
            "returncode": proc.returncode,
            "stderr": stderr,
            "stdout": stdout,
            "elapsed_ms": elapsed_ms,
        }
