"""
Progress tracker — completed vs estimated tasks, with ETA.

The total is an estimate, so ``completed`` may overrun it; percent is
then capped at 100 and the ETA at zero.  Rendering the status line is
left to whoever subscribes through ``on_update``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from devsetup.core.services.install.domain.formatting import fmt_eta

logger = logging.getLogger(__name__)


@dataclass
class ProgressSnapshot:
    """Counters after one ``advance()`` call."""

    completed: int
    total: int
    percent: int | None = None
    elapsed_seconds: int = 0
    eta_seconds: int | None = None

    @property
    def eta(self) -> str:
        return fmt_eta(self.eta_seconds) if self.eta_seconds is not None else ""

    @property
    def final(self) -> bool:
        """Whether this snapshot closes the run (newline after the line)."""
        return self.total > 0 and self.completed == self.total

    def render(self) -> str:
        """The transient status line, carriage-return prefixed."""
        if self.percent is None:
            return ""
        return (
            f"\r[PROGRESS] {self.completed}/{self.total} tasks "
            f"({self.percent}%) - ETA: {self.eta}  "
        )


@dataclass
class ProgressTracker:
    """Counts completed tasks against an estimated total."""

    clock: Callable[[], float] = time.monotonic
    on_update: Callable[[ProgressSnapshot], None] | None = None
    total: int = 0
    completed: int = 0
    started_at: float | None = field(default=None)

    def start(self) -> None:
        self.started_at = self.clock()
        self.completed = 0

    def set_total(self, n: int) -> None:
        self.total = max(0, n)
        logger.info("Estimated tasks: %d", self.total)

    def advance(self) -> ProgressSnapshot:
        """Mark one more task done and compute percent and ETA."""
        if self.started_at is None:
            self.start()
        self.completed += 1
        snapshot = self.snapshot()
        if snapshot.percent is not None:
            logger.debug(
                "Progress %d/%d (%d%%) ETA %s",
                snapshot.completed, snapshot.total, snapshot.percent, snapshot.eta,
            )
        if self.on_update is not None:
            self.on_update(snapshot)
        return snapshot

    def snapshot(self) -> ProgressSnapshot:
        elapsed = self.elapsed_seconds()
        if self.total == 0:
            return ProgressSnapshot(self.completed, 0, elapsed_seconds=elapsed)

        percent = min(100, self.completed * 100 // self.total)
        eta = 0
        if self.completed > 0:
            avg = elapsed // self.completed
            remaining = max(0, self.total - self.completed)
            eta = avg * remaining
        return ProgressSnapshot(
            completed=self.completed,
            total=self.total,
            percent=percent,
            elapsed_seconds=elapsed,
            eta_seconds=eta,
        )

    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        return int(self.clock() - self.started_at)


def estimate_total_tasks(
    selected: Iterable[str],
    dependencies: Mapping[str, str],
    installed: Callable[[str], bool],
) -> int:
    """Estimate the task count for a run.

    Counts the selected components plus any prerequisite that is neither
    selected nor already installed.  Components already installed are
    still counted: they advance progress when skipped.
    """
    chosen = list(dict.fromkeys(selected))
    extra = {
        dependencies[name]
        for name in chosen
        if dependencies.get(name)
        and dependencies[name] not in chosen
        and not installed(dependencies[name])
    }
    return len(chosen) + len(extra)
