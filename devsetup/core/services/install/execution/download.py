"""
L4 Execution — Downloads.

Single-stream fetch (curl), checksum-verified download, and the
multi-connection path (aria2c with a wget fallback).  Every network
call goes through the command runner so dry-run is honoured and the
command line is logged.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from devsetup.core.services.install.data.constants import (
    DEFAULT_DOWNLOAD_CONNECTIONS,
    DEFAULT_DOWNLOAD_RETRIES,
    DOWNLOAD_RETRY_WAIT_SECONDS,
    DOWNLOAD_TIMEOUT_SECONDS,
)
from devsetup.core.services.install.domain.errors import (
    ChecksumMismatch,
    DownloadFailed,
    UnsupportedAlgorithm,
)
from devsetup.core.services.install.execution.checksum import verify_checksum
from devsetup.core.services.install.execution.subprocess_runner import CommandRunner

logger = logging.getLogger(__name__)

# (url, destination) -> destination; raises DownloadFailed
Fetcher = Callable[[str, Path], Path]


def fetch_url(
    url: str,
    destination: Path,
    *,
    runner: CommandRunner,
    timeout: int = DOWNLOAD_TIMEOUT_SECONDS,
) -> Path:
    """Download ``url`` to ``destination`` with a single stream.

    Raises:
        DownloadFailed: curl failed or produced no file.  Any partial
            file is removed.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s...", destination.name)

    result = runner.run(
        ["curl", "-fsSL", "-o", str(destination), url],
        timeout=timeout,
    )
    if not result["ok"]:
        destination.unlink(missing_ok=True)
        raise DownloadFailed(url, result.get("stderr") or result.get("error", ""))
    if not result.get("dry_run") and not destination.is_file():
        raise DownloadFailed(url, "no file written")
    return destination


def make_fetcher(runner: CommandRunner) -> Fetcher:
    """Bind ``fetch_url`` to a runner for use by the download cache."""

    def _fetch(url: str, destination: Path) -> Path:
        return fetch_url(url, destination, runner=runner)

    return _fetch


def download_file(
    url: str,
    destination: Path,
    checksum: str | None = None,
    *,
    runner: CommandRunner,
) -> dict[str, Any]:
    """Download and (optionally) verify a file, bypassing the cache.

    Returns:
        ``{"ok": True, "path": "..."}`` or ``{"ok": False, "error": "..."}``.
        A file failing verification is deleted.
    """
    if runner.dry_run:
        logger.info("[dry-run] Would download: %s -> %s", url, destination)
        return {"ok": True, "path": str(destination), "dry_run": True}

    try:
        fetch_url(url, destination, runner=runner)
        if checksum:
            verify_checksum(destination, checksum)
    except DownloadFailed as e:
        return {"ok": False, "error": str(e)}
    except (ChecksumMismatch, UnsupportedAlgorithm) as e:
        destination.unlink(missing_ok=True)
        return {"ok": False, "error": str(e)}

    return {"ok": True, "path": str(destination)}


def download_file_optimized(
    url: str,
    destination: Path,
    *,
    runner: CommandRunner,
    max_retries: int = DEFAULT_DOWNLOAD_RETRIES,
    connections: int = DEFAULT_DOWNLOAD_CONNECTIONS,
) -> dict[str, Any]:
    """Download with parallel connections and bounded retries.

    Uses aria2c when present; falls back to wget with its own retry
    count if aria2c is missing or fails.

    Returns:
        ``{"ok": True, "path": "...", "tool": "aria2c"|"wget"}`` or
        ``{"ok": False, "error": "..."}``.
    """
    if runner.dry_run:
        logger.info("[dry-run] Would download: %s", url)
        return {"ok": True, "path": str(destination), "dry_run": True}

    destination.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading: %s", destination.name)

    if shutil.which("aria2c"):
        result = runner.run(
            [
                "aria2c",
                f"--max-tries={max_retries}",
                f"--retry-wait={DOWNLOAD_RETRY_WAIT_SECONDS}",
                f"--max-connection-per-server={connections}",
                f"--split={connections}",
                "--min-split-size=1M",
                "--continue=true",
                "--allow-overwrite=true",
                "--auto-file-renaming=false",
                "--console-log-level=warn",
                "--summary-interval=0",
                f"--dir={destination.parent}",
                f"--out={destination.name}",
                url,
            ],
            critical=False,
            has_fallback=True,
            timeout=DOWNLOAD_TIMEOUT_SECONDS,
        )
        if result["ok"]:
            logger.info("Downloaded: %s", destination.name)
            return {"ok": True, "path": str(destination), "tool": "aria2c"}
        logger.warning("aria2c failed, falling back to wget...")
    else:
        logger.info("aria2c not available, using wget")

    result = runner.run(
        ["wget", "-q", f"--tries={max_retries}", "-O", str(destination), url],
        timeout=DOWNLOAD_TIMEOUT_SECONDS,
    )
    if not result["ok"]:
        destination.unlink(missing_ok=True)
        logger.error("Download failed: %s", url)
        return {"ok": False, "error": f"Download failed: {url}"}

    logger.info("Downloaded: %s", destination.name)
    return {"ok": True, "path": str(destination), "tool": "wget"}
