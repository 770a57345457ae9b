"""
State file persistence — atomic read/write for InstallState.

State is stored as JSON in /var/lib/devsetup/state.json.  Writes are
atomic (write to temp file, then rename) so a crash mid-write leaves the
previous valid state in place.

``StateStore`` wraps the file with the in-memory view used during a run:
lookups hit memory, every ``mark_installed`` rewrites the whole file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from devsetup.core.models.state import InstallState
from devsetup.core.persistence.transaction_log import ACTION_INSTALL, TransactionLog
from devsetup.core.services.install.domain.errors import StateWriteFailed

logger = logging.getLogger(__name__)

# Default state file location
DEFAULT_STATE_DIR = Path("/var/lib/devsetup")
DEFAULT_STATE_FILE = "state.json"


def default_state_path(state_dir: Path | None = None) -> Path:
    """Get the state file path inside ``state_dir``."""
    return (state_dir or DEFAULT_STATE_DIR) / DEFAULT_STATE_FILE


def load_state(path: Path) -> InstallState:
    """Load install state from a JSON file.

    Args:
        path: Path to the state JSON file.

    Returns:
        InstallState model.  A missing or unreadable file yields a fresh
        state; a malformed one additionally logs a warning.
    """
    if not path.is_file():
        logger.info("No state file at %s — starting fresh", path)
        return InstallState()

    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        state = InstallState.model_validate(data)
        logger.debug("Loaded state from %s (%d components)", path, len(state.installed))
        return state
    except UnicodeDecodeError as e:
        logger.warning("State file %s is not UTF-8: %s — starting fresh", path, e)
        return InstallState()
    except json.JSONDecodeError as e:
        logger.warning("Corrupt state file %s: %s — starting fresh", path, e)
        return InstallState()
    except ValidationError as e:
        logger.warning("Invalid state file %s: %s — starting fresh", path, e)
        return InstallState()
    except OSError as e:
        logger.warning("Cannot read state from %s: %s — starting fresh", path, e)
        return InstallState()


def save_state(state: InstallState, path: Path) -> None:
    """Save install state to a JSON file (atomic write).

    Uses write-to-temp-then-rename to prevent corruption.

    Args:
        state: The state to save.
        path: Target path for the state file.
    """
    state.touch()

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    # Serialize
    data = state.model_dump(mode="json")
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    # Atomic write: temp file in same directory, then rename
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".state_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
            logger.debug("State saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save state to %s: %s", path, e)
        raise


class StateStore:
    """In-memory installed-component map backed by the state file.

    Args:
        path: State file location.
        transaction_log: Receives an INSTALL line per ``mark_installed``.
        dry_run: When True, nothing is recorded or written.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        transaction_log: TransactionLog | None = None,
        dry_run: bool = False,
    ):
        self._path = path if path is not None else default_state_path()
        self._log = transaction_log or TransactionLog(
            self._path.parent / "transaction.log", dry_run=dry_run,
        )
        self._dry_run = dry_run
        self._state = InstallState()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def transaction_log(self) -> TransactionLog:
        return self._log

    @property
    def installed(self) -> dict[str, str]:
        """Copy of the component → version map."""
        return dict(self._state.installed)

    @property
    def last_run(self) -> str:
        return self._state.last_run

    def load(self) -> None:
        """Repopulate the in-memory map from the state file."""
        self._state = load_state(self._path)

    def is_installed(self, name: str) -> bool:
        return name in self._state.installed

    def installed_version(self, name: str) -> str | None:
        return self._state.installed.get(name)

    def mark_installed(self, name: str, version: str | None = "unknown") -> None:
        """Record ``name`` at ``version`` and persist the whole map.

        Raises:
            StateWriteFailed: The state file could not be written.
        """
        version = version or "unknown"
        if self._dry_run:
            logger.info("[dry-run] Would record %s (%s)", name, version)
            return

        # Memory only changes once the file does
        updated = self._state.model_copy(deep=True)
        updated.installed[name] = version
        self._save(updated)
        self._state = updated
        self._log.write(ACTION_INSTALL, name, f"version={version}")

    def persist(self) -> None:
        """Write the full state to disk (no-op in dry-run).

        Raises:
            StateWriteFailed: The write or rename failed.
        """
        if self._dry_run:
            return
        self._save(self._state)

    def _save(self, state: InstallState) -> None:
        try:
            save_state(state, self._path)
        except OSError as e:
            raise StateWriteFailed(f"Cannot write state file {self._path}: {e}") from e
