"""
Setup context — everything an installer needs for one run.

The orchestrator builds ONE ``SetupContext`` per run and passes it
explicitly to every installer:

    - CLI:     main.py → build_context(...) → SetupOrchestrator(ctx)
    - Tests:   conftest → SetupContext(...) with tmp_path locations

It owns the run's collaborators (command runner, state store, download
cache, backup manager, progress tracker) plus the facts recipes are
rendered against (platform, user, versions).
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from devsetup.core.models.config import SetupConfig
from devsetup.core.persistence.state_file import (
    DEFAULT_STATE_DIR,
    StateStore,
    default_state_path,
)
from devsetup.core.persistence.transaction_log import DEFAULT_TRANSACTION_FILE, TransactionLog
from devsetup.core.services.install.detection.platform import PlatformInfo
from devsetup.core.services.install.detection.tool_version import command_exists, search_path
from devsetup.core.services.install.detection.user import UserInfo, get_user_info
from devsetup.core.services.install.domain.progress import ProgressTracker
from devsetup.core.services.install.execution.backup import BackupManager, get_backup_dir
from devsetup.core.services.install.execution.cache import DownloadCache, get_cache_dir
from devsetup.core.services.install.execution.download import make_fetcher
from devsetup.core.services.install.execution.subprocess_runner import CommandRunner

logger = logging.getLogger(__name__)

# Tool directories that are not on a fresh PATH
_EXTRA_PATH = ("/usr/local/go/bin", "/snap/bin")


@dataclass
class SetupContext:
    """Per-run collaborators and facts."""

    runner: CommandRunner
    state: StateStore
    cache: DownloadCache
    backups: BackupManager
    progress: ProgressTracker = field(default_factory=ProgressTracker)
    user: UserInfo = field(default_factory=get_user_info)
    platform: PlatformInfo | None = None
    dry_run: bool = False
    auto_approve: bool = False
    versions: dict[str, str] = field(default_factory=dict)
    checksums: dict[str, str] = field(default_factory=dict)
    log_dir: Path | None = None
    _work_dir: Path | None = field(default=None, repr=False)

    # ── Recipe rendering ────────────────────────────────────────

    def placeholders(self) -> dict[str, str]:
        values = {
            "user": self.user.name,
            "home": str(self.user.home),
            "today": time.strftime("%Y-%m-%d"),
        }
        if self.platform is not None:
            values.update(
                arch=self.platform.arch,
                machine=self.platform.machine,
                codename=self.platform.codename,
            )
        return values

    def render(self, text: str, **extra: str) -> str:
        """Substitute ``{name}`` placeholders; unknown ones are left alone."""
        values = {**self.placeholders(), **extra}
        for key, value in values.items():
            text = text.replace("{" + key + "}", value)
        return text

    def version_for(self, name: str, recipe: dict) -> str | None:
        """Configured version for ``name``, else the recipe default."""
        return self.versions.get(name) or recipe.get("default_version")

    def checksum_for(self, name: str) -> str | None:
        return self.checksums.get(name)

    # ── Host lookups ────────────────────────────────────────────

    @property
    def search_path(self) -> str:
        home = self.user.home
        return search_path([*_EXTRA_PATH, str(home / ".cargo" / "bin"), str(home / ".local" / "bin")])

    def command_exists(self, command: str) -> bool:
        return command_exists(command, self.search_path)

    # ── Scratch space ───────────────────────────────────────────

    @property
    def work_dir(self) -> Path:
        """Scratch directory for downloads, created on first use.

        In dry-run the path is returned without being created.
        """
        if self._work_dir is None:
            if self.dry_run:
                self._work_dir = Path(tempfile.gettempdir()) / "devsetup-dry-run"
            else:
                self._work_dir = Path(tempfile.mkdtemp(prefix="devsetup-"))
                # as_user scripts read from here
                self._work_dir.chmod(0o755)
        return self._work_dir

    def cleanup(self) -> None:
        """Remove the scratch directory."""
        if self._work_dir is not None and not self.dry_run and self._work_dir.is_dir():
            shutil.rmtree(self._work_dir, ignore_errors=True)
            logger.debug("Removed work dir %s", self._work_dir)
        self._work_dir = None


def resolve_state_dir(config: SetupConfig | None = None) -> Path:
    """``paths.state_dir`` > ``DEVSETUP_STATE_DIR`` > /var/lib/devsetup."""
    if config is not None and config.paths.state_dir is not None:
        return config.paths.state_dir
    return Path(os.environ.get("DEVSETUP_STATE_DIR", str(DEFAULT_STATE_DIR)))


def build_context(
    config: SetupConfig | None = None,
    *,
    dry_run: bool = False,
    auto_approve: bool = False,
    progress: ProgressTracker | None = None,
    user: UserInfo | None = None,
) -> SetupContext:
    """Wire up a context from configuration and environment."""
    config = config or SetupConfig()
    user = user or get_user_info()

    state_dir = resolve_state_dir(config)
    transaction_log = TransactionLog(state_dir / DEFAULT_TRANSACTION_FILE, dry_run=dry_run)
    runner = CommandRunner(dry_run=dry_run, run_as=user.name)

    state = StateStore(
        default_state_path(state_dir), transaction_log=transaction_log, dry_run=dry_run,
    )
    state.load()

    cache = DownloadCache(
        config.paths.cache_dir or get_cache_dir(),
        fetcher=make_fetcher(runner),
        dry_run=dry_run,
    )
    backups = BackupManager(
        config.paths.backup_dir or get_backup_dir(),
        transaction_log=transaction_log,
        dry_run=dry_run,
    )

    return SetupContext(
        runner=runner,
        state=state,
        cache=cache,
        backups=backups,
        progress=progress or ProgressTracker(),
        user=user,
        dry_run=dry_run,
        auto_approve=auto_approve or dry_run,
        versions=dict(config.versions),
        checksums=dict(config.checksums),
        log_dir=config.paths.log_dir,
    )
