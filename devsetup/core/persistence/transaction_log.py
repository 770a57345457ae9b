"""
Transaction log — append-only record of mutating actions.

One text line per action::

    [2026-10-18T09:30:12+00:00] INSTALL: docker - version=27.3.1
    [2026-10-18T09:30:40+00:00] BACKUP: /etc/sysctl.conf - /root/.devsetup-backups/...

The log is write-once.  Nothing reads it back; rollback guidance
points the operator at it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Default transaction log location (next to the state file)
DEFAULT_TRANSACTION_DIR = Path("/var/lib/devsetup")
DEFAULT_TRANSACTION_FILE = "transaction.log"

ACTION_INSTALL = "INSTALL"
ACTION_BACKUP = "BACKUP"


def format_entry(action: str, subject: str, detail: str = "", when: datetime | None = None) -> str:
    """Build one log line (without trailing newline)."""
    stamp = (when or datetime.now(UTC)).isoformat(timespec="seconds")
    return f"[{stamp}] {action}: {subject} - {detail}"


class TransactionLog:
    """Append-only transaction log writer.

    Each call to write() appends a single line.  The file and its
    directory are created on first write.  In dry-run mode nothing
    touches the disk.
    """

    def __init__(self, path: Path | None = None, *, dry_run: bool = False):
        self._path = path if path is not None else DEFAULT_TRANSACTION_DIR / DEFAULT_TRANSACTION_FILE
        self._dry_run = dry_run

    @property
    def path(self) -> Path:
        return self._path

    def write(self, action: str, subject: str, detail: str = "") -> None:
        """Append a transaction line."""
        line = format_entry(action, subject, detail)

        if self._dry_run:
            logger.debug("[dry-run] transaction not recorded: %s", line)
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
            logger.debug("Transaction recorded: %s %s", action, subject)
        except OSError as e:
            logger.error("Failed to write transaction log %s: %s", self._path, e)
