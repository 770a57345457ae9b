"""
L4 Execution — Idempotent config file edits.

Append-if-missing (single lines or marked blocks), create-if-missing
writes and replace-in-place, each guarded by a content check so re-runs
change nothing.  The first change to a file can be preceded
by a backup.
"""

from __future__ import annotations

import logging
import os
import pwd
import re
import shutil
from pathlib import Path

from devsetup.core.services.install.execution.backup import BackupManager

logger = logging.getLogger(__name__)


def file_contains(path: Path, needle: str) -> bool:
    """``grep -qF``: whether ``path`` exists and contains ``needle``."""
    if not path.is_file():
        return False
    return needle in path.read_text(encoding="utf-8", errors="replace")


def ensure_line(
    path: Path,
    line: str,
    *,
    marker: str | None = None,
    dry_run: bool = False,
    backups: BackupManager | None = None,
    backup_name: str | None = None,
) -> bool:
    """Append ``line`` to ``path`` unless ``marker`` (or the line) is present.

    Returns:
        True if the file was (or in dry-run would be) changed.
    """
    if file_contains(path, marker or line):
        logger.debug("%s already contains %r", path, marker or line)
        return False

    if dry_run:
        logger.info("[dry-run] Would append to %s: %s", path, line)
        return True

    if backups is not None and backup_name:
        backups.create_backup(path, backup_name)

    path.parent.mkdir(parents=True, exist_ok=True)
    existing = path.read_text(encoding="utf-8") if path.is_file() else ""
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{prefix}{line}\n")
    logger.info("Appended to %s: %s", path, line)
    return True


def ensure_block(
    path: Path,
    text: str,
    *,
    marker: str,
    dry_run: bool = False,
    backups: BackupManager | None = None,
    backup_name: str | None = None,
) -> bool:
    """Append a multi-line ``text`` block unless ``marker`` is present.

    The block is separated from existing content by a blank line.

    Returns:
        True if the file was (or in dry-run would be) changed.
    """
    if file_contains(path, marker):
        logger.debug("%s already contains %r", path, marker)
        return False

    if dry_run:
        logger.info("[dry-run] Would append block %r to %s", marker, path)
        return True

    if backups is not None and backup_name:
        backups.create_backup(path, backup_name)

    path.parent.mkdir(parents=True, exist_ok=True)
    existing = path.read_text(encoding="utf-8") if path.is_file() else ""
    if not existing:
        prefix = ""
    elif existing.endswith("\n"):
        prefix = "\n"
    else:
        prefix = "\n\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(prefix + text.rstrip("\n") + "\n")
    logger.info("Appended %r block to %s", marker, path)
    return True


def write_file(
    path: Path,
    content: str,
    *,
    mode: int | None = None,
    overwrite: bool = False,
    dry_run: bool = False,
) -> bool:
    """Write ``content`` to ``path``; an existing file is kept unless ``overwrite``.

    Returns:
        True if the file was (or in dry-run would be) written.
    """
    if path.exists() and not overwrite:
        logger.info("%s already exists, leaving it alone", path)
        return False

    if dry_run:
        logger.info("[dry-run] Would write %s", path)
        return True

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    logger.info("Wrote %s", path)
    return True


def chown_to_user(path: Path, user: str) -> None:
    """Hand a file written as root back to ``user`` (no-op unless root)."""
    if os.geteuid() != 0 or user == "root" or not path.exists():
        return
    try:
        shutil.chown(path, user=user, group=pwd.getpwnam(user).pw_gid)
    except (LookupError, OSError) as e:
        logger.warning("Cannot chown %s to %s: %s", path, user, e)


def replace_in_file(
    path: Path,
    old: str,
    new: str,
    *,
    regex: bool = False,
    dry_run: bool = False,
    backups: BackupManager | None = None,
    backup_name: str | None = None,
) -> bool:
    """Replace every ``old`` with ``new`` in ``path`` (``sed -i`` style).

    With ``regex`` set, ``old`` is a multi-line pattern (``^``/``$`` match
    at line boundaries) and ``new`` may use group references.

    Returns:
        True if the file was (or in dry-run would be) changed.  A
        missing file, absent ``old`` text or a replacement that leaves
        the content as it was changes nothing.
    """
    if not path.is_file():
        return False

    content = path.read_text(encoding="utf-8", errors="replace")
    if regex:
        updated = re.sub(old, new, content, flags=re.MULTILINE)
    else:
        updated = content.replace(old, new)
    if updated == content:
        return False

    if dry_run:
        logger.info("[dry-run] Would edit %s: %r -> %r", path, old, new)
        return True

    if backups is not None and backup_name:
        backups.create_backup(path, backup_name)

    path.write_text(updated, encoding="utf-8")
    logger.info("Edited %s", path)
    return True
