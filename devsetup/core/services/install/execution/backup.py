"""
L4 Execution — Pre-change backups.

Creates timestamped copies of config files before they are modified
(``<backup_dir>/<name>.<YYYY-mm-dd_HH:MM:SS>.bak``) and records each in
the transaction log.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Iterable
from pathlib import Path

from devsetup.core.persistence.transaction_log import ACTION_BACKUP, TransactionLog
from devsetup.core.services.install.data.constants import DEFAULT_BACKUP_DIR

logger = logging.getLogger(__name__)


def get_backup_dir() -> Path:
    """Return the backup directory (``DEVSETUP_BACKUP_DIR`` overrides)."""
    return Path(os.environ.get("DEVSETUP_BACKUP_DIR", str(DEFAULT_BACKUP_DIR)))


class BackupManager:
    """Copies files aside before they are changed.

    Args:
        backup_dir: Where copies go.
        transaction_log: Receives a BACKUP line per copy.
        dry_run: Log instead of copying.
    """

    def __init__(
        self,
        backup_dir: Path | None = None,
        *,
        transaction_log: TransactionLog | None = None,
        dry_run: bool = False,
    ):
        self.backup_dir = backup_dir if backup_dir is not None else get_backup_dir()
        self._log = transaction_log
        self._dry_run = dry_run
        self.created: list[Path] = []

    def create_backup(self, path: Path, name: str | None = None) -> Path | None:
        """Copy ``path`` into the backup directory.

        Returns:
            The backup path, or None when the file does not exist, the
            run is a dry-run, or the copy failed (logged).
        """
        if not path.is_file():
            logger.debug("Skipping backup of non-existent file: %s", path)
            return None

        stamp = time.strftime("%Y-%m-%d_%H:%M:%S")
        backup_path = self.backup_dir / f"{name or path.name}.{stamp}.bak"

        if self._dry_run:
            logger.info("[dry-run] Would backup: %s -> %s", path, backup_path)
            return None

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, backup_path)
        except OSError as e:
            logger.warning("Backup failed for %s: %s", path, e)
            return None

        self.created.append(backup_path)
        logger.info("Backed up: %s -> %s", path, backup_path)
        if self._log is not None:
            self._log.write(ACTION_BACKUP, str(path), str(backup_path))
        return backup_path

    def backup_all(self, paths: Iterable[Path]) -> list[Path]:
        """Back up every existing path; returns the copies made."""
        made = []
        for path in paths:
            copy = self.create_backup(path)
            if copy is not None:
                made.append(copy)
        return made
