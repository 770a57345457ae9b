"""
L4 Execution — apt helpers.

Lock waiting, package installs, and third-party repository setup
(signing key + sources list).
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from devsetup.core.services.install.data.constants import (
    APT_LOCK_FILES,
    APT_LOCK_MAX_WAIT_SECONDS,
    APT_LOCK_POLL_SECONDS,
)
from devsetup.core.services.install.execution.download import download_file
from devsetup.core.services.install.execution.subprocess_runner import CommandRunner

logger = logging.getLogger(__name__)


def _lock_held(runner: CommandRunner) -> bool:
    for lock in APT_LOCK_FILES:
        if runner.query(["fuser", lock], timeout=5)["ok"]:
            return True
    return False


def wait_for_apt_lock(
    runner: CommandRunner,
    *,
    max_wait: int = APT_LOCK_MAX_WAIT_SECONDS,
    poll: int = APT_LOCK_POLL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Wait for other package managers to release the dpkg/apt locks.

    Returns:
        True when the locks are free, False after ``max_wait`` seconds
        (logged as a warning; callers continue anyway).
    """
    if runner.dry_run or not shutil.which("fuser"):
        return True

    waited = 0
    while _lock_held(runner):
        if waited == 0:
            logger.info("Waiting for other package managers to finish...")
        sleep(poll)
        waited += poll
        if waited >= max_wait:
            logger.warning("Timeout waiting for apt lock. Continuing anyway...")
            return False

    if waited > 0:
        logger.info("Package manager is now available")
    return True


def apt_update(runner: CommandRunner) -> dict[str, Any]:
    wait_for_apt_lock(runner)
    return runner.run(["apt-get", "update"])


def apt_install(runner: CommandRunner, packages: list[str]) -> dict[str, Any]:
    """``apt-get install -y`` the given packages (or local .deb paths)."""
    if not packages:
        return {"ok": True, "stdout": ""}
    wait_for_apt_lock(runner)
    return runner.run(["apt-get", "install", "-y", *packages])


def add_apt_repository(
    repo: dict,
    *,
    runner: CommandRunner,
    work_dir: Path,
    render: Callable[[str], str],
) -> dict[str, Any]:
    """Install a repository signing key and its sources list entry.

    Args:
        repo: ``key_url``, ``keyring``, ``dearmor``, ``source``,
            ``list_file`` from the recipe.
        runner: Command runner (dry-run aware).
        work_dir: Scratch directory for the downloaded key.
        render: Placeholder substitution for the source line.

    Returns:
        ``{"ok": True}`` or ``{"ok": False, "error": "..."}``.
    """
    keyring = Path(repo["keyring"])
    list_file = Path(repo["list_file"])
    source = render(repo["source"])

    if runner.dry_run:
        logger.info("[dry-run] Would add apt repository %s (%s)", list_file.name, repo["key_url"])
        return {"ok": True, "dry_run": True}

    if not keyring.is_file():
        key_tmp = work_dir / f"{keyring.stem}.key"
        dl = download_file(repo["key_url"], key_tmp, runner=runner)
        if not dl["ok"]:
            return dl

        keyring.parent.mkdir(parents=True, exist_ok=True)
        if repo.get("dearmor", True):
            result = runner.run(["gpg", "--dearmor", "--yes", "-o", str(keyring), str(key_tmp)])
            key_tmp.unlink(missing_ok=True)
            if not result["ok"]:
                return {"ok": False, "error": f"gpg --dearmor failed for {keyring}"}
        else:
            shutil.move(str(key_tmp), keyring)
        keyring.chmod(0o644)
        logger.info("Installed signing key %s", keyring)

    list_file.parent.mkdir(parents=True, exist_ok=True)
    list_file.write_text(source + "\n", encoding="utf-8")
    logger.info("Wrote %s", list_file)

    result = apt_update(runner)
    if not result["ok"]:
        return {"ok": False, "error": "apt-get update failed after adding repository"}
    return {"ok": True}
