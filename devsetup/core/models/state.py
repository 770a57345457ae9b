"""
InstallState — the persisted record of installed components.

Serialized to ``state.json`` and loaded at the start of every run so
that the next invocation knows what is already in place.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from devsetup import __version__


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat(timespec="seconds")


class InstallState(BaseModel):
    """Root state document.

    Shape on disk::

        {"version": "3.0.0", "last_run": "2026-...", "installed": {"go": "go1.23.4"}}
    """

    version: str = __version__
    last_run: str = ""
    installed: dict[str, str] = Field(default_factory=dict)

    def touch(self) -> None:
        """Stamp the last-run time and current tool version."""
        self.last_run = _now_iso()
        self.version = __version__
