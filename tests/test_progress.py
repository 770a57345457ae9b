"""
Tests for progress tracking, ETA and formatting.
"""

import logging

from devsetup.core.services.install.domain.formatting import fmt_elapsed, fmt_eta, fmt_size
from devsetup.core.services.install.domain.progress import (
    ProgressSnapshot,
    ProgressTracker,
    estimate_total_tasks,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestProgressTracker:
    def test_percent_after_k_advances(self):
        for total in (1, 3, 7, 29):
            tracker = ProgressTracker(clock=FakeClock())
            tracker.start()
            tracker.set_total(total)
            for k in range(1, total + 1):
                snap = tracker.advance()
                assert snap.completed == k
                assert snap.percent == k * 100 // total

    def test_eta_from_average(self):
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)
        tracker.start()
        tracker.set_total(4)

        clock.now += 30
        snap = tracker.advance()
        assert snap.elapsed_seconds == 30
        assert snap.eta_seconds == 90
        assert snap.eta == "1m 30s"

    def test_zero_total_has_no_percent(self):
        tracker = ProgressTracker(clock=FakeClock())
        tracker.start()
        snap = tracker.advance()
        assert snap.percent is None
        assert snap.eta_seconds is None
        assert snap.render() == ""

    def test_overrun_caps_percent(self):
        """The total is an estimate; completed may exceed it."""
        tracker = ProgressTracker(clock=FakeClock())
        tracker.start()
        tracker.set_total(1)
        tracker.advance()
        snap = tracker.advance()
        assert snap.percent == 100
        assert snap.eta_seconds == 0

    def test_advance_without_start(self):
        tracker = ProgressTracker(clock=FakeClock())
        tracker.set_total(2)
        assert tracker.advance().completed == 1

    def test_on_update_callback(self):
        seen = []
        tracker = ProgressTracker(clock=FakeClock(), on_update=seen.append)
        tracker.start()
        tracker.set_total(2)
        tracker.advance()
        tracker.advance()
        assert [s.completed for s in seen] == [1, 2]
        assert seen[-1].final

    def test_set_total_logs_estimate(self, caplog):
        tracker = ProgressTracker(clock=FakeClock())
        with caplog.at_level(logging.INFO):
            tracker.set_total(5)
        assert "Estimated tasks: 5" in caplog.text


class TestSnapshotRender:
    def test_status_line(self):
        snap = ProgressSnapshot(completed=2, total=5, percent=40, eta_seconds=42)
        assert snap.render().startswith("\r[PROGRESS] 2/5 tasks (40%) - ETA: 42s")
        assert not snap.final

    def test_final(self):
        assert ProgressSnapshot(completed=5, total=5, percent=100, eta_seconds=0).final


class TestEstimateTotalTasks:
    DEPS = {"vscode": "common_dev_tools", "helm": "kubectl"}

    def test_counts_selected(self):
        assert estimate_total_tasks(["go", "rust"], self.DEPS, lambda n: False) == 2

    def test_adds_missing_prerequisites(self):
        assert estimate_total_tasks(["helm"], self.DEPS, lambda n: False) == 2

    def test_selected_prerequisite_not_double_counted(self):
        assert estimate_total_tasks(["kubectl", "helm"], self.DEPS, lambda n: False) == 2

    def test_installed_prerequisite_not_counted(self):
        assert estimate_total_tasks(["helm"], self.DEPS, lambda n: n == "kubectl") == 1


class TestFormatting:
    def test_fmt_eta(self):
        assert fmt_eta(42) == "42s"
        assert fmt_eta(60) == "60s"
        assert fmt_eta(125) == "2m 5s"

    def test_fmt_elapsed(self):
        assert fmt_elapsed(5) == "0m 5s"
        assert fmt_elapsed(3725) == "62m 5s"

    def test_fmt_size(self):
        assert fmt_size(512) == "512.0 B"
        assert fmt_size(2048) == "2.0 KB"
