"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from devsetup.core.context import SetupContext
from devsetup.core.persistence.state_file import StateStore
from devsetup.core.persistence.transaction_log import TransactionLog
from devsetup.core.services.install.detection.platform import PlatformInfo
from devsetup.core.services.install.detection.user import UserInfo
from devsetup.core.services.install.domain.errors import DownloadFailed
from devsetup.core.services.install.domain.progress import ProgressTracker
from devsetup.core.services.install.execution.backup import BackupManager
from devsetup.core.services.install.execution.cache import DownloadCache
from devsetup.core.services.install.execution.subprocess_runner import CommandRunner


class RecordingRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them.

    Commands whose joined text starts with one of ``fail_on`` fail with
    exit status 1.
    """

    def __init__(self, *, dry_run: bool = False, fail_on: tuple[str, ...] = ()):
        super().__init__(dry_run=dry_run)
        self.calls: list[list[str]] = []
        self.fail_on = fail_on

    def _execute(self, cmd, timeout, env_overrides, cwd):
        self.calls.append(list(cmd))
        if cmd[0] == "fuser":
            # No process holds the apt locks
            return {"ok": False, "error": "Command failed (exit 1)", "returncode": 1}
        joined = " ".join(cmd)
        if any(joined.startswith(prefix) for prefix in self.fail_on):
            return {
                "ok": False,
                "error": "Command failed (exit 1)",
                "returncode": 1,
                "stderr": "boom",
                "stdout": "",
                "elapsed_ms": 0,
            }
        return {"ok": True, "stdout": "", "stderr": "", "elapsed_ms": 0}

    def ran(self, *prefix: str) -> bool:
        """Whether any recorded command starts with ``prefix``."""
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)


class FakeFetcher:
    """Stands in for the network: writes a payload per URL and counts calls."""

    def __init__(self, payloads: dict[str, bytes] | None = None, default: bytes = b"payload\n"):
        self.payloads = payloads or {}
        self.default = default
        self.calls: list[str] = []
        self.failing: set[str] = set()

    def __call__(self, url: str, destination: Path) -> Path:
        self.calls.append(url)
        if url in self.failing:
            raise DownloadFailed(url, "HTTP 404")
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.payloads.get(url, self.default))
        return destination


@pytest.fixture
def tmp_state_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for state files."""
    state_dir = tmp_path / "state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def make_runner():
    """Factory: ``make_runner(dry_run=..., fail_on=(...))``."""
    return RecordingRunner


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def make_context(tmp_path: Path, home: Path, fetcher: FakeFetcher):
    """Factory for a SetupContext rooted in tmp_path."""

    def _make(*, dry_run: bool = False, runner: CommandRunner | None = None) -> SetupContext:
        state_dir = tmp_path / "state"
        log = TransactionLog(state_dir / "transaction.log", dry_run=dry_run)
        return SetupContext(
            runner=runner or RecordingRunner(dry_run=dry_run),
            state=StateStore(state_dir / "state.json", transaction_log=log, dry_run=dry_run),
            cache=DownloadCache(tmp_path / "cache", fetcher=fetcher, dry_run=dry_run),
            backups=BackupManager(tmp_path / "backups", transaction_log=log, dry_run=dry_run),
            progress=ProgressTracker(),
            user=UserInfo(name="tester", home=home),
            platform=PlatformInfo(
                os_id="pop", version_id="22.04", codename="jammy",
                arch="amd64", machine="x86_64",
            ),
            dry_run=dry_run,
            auto_approve=True,
        )

    return _make
