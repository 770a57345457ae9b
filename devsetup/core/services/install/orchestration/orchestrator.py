"""
L5 Orchestration — The provisioning run.

Ties everything together: preflight checks, component selection,
dependency resolution, installer dispatch, state recording and
progress.  One component failing never stops the others; only a
platform error aborts the run.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from devsetup.core.context import SetupContext
from devsetup.core.models.receipt import InstallReceipt
from devsetup.core.persistence.state_file import StateStore
from devsetup.core.services.install.data.dependencies import DEPENDENCIES
from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES
from devsetup.core.services.install.detection.account import account_advisories
from devsetup.core.services.install.detection.platform import (
    OS_RELEASE,
    RequirementsReport,
    check_system_requirements,
    detect_platform,
)
from devsetup.core.services.install.domain.errors import (
    ChecksumMismatch,
    PlatformError,
    StateWriteFailed,
)
from devsetup.core.services.install.domain.formatting import fmt_elapsed
from devsetup.core.services.install.domain.progress import estimate_total_tasks
from devsetup.core.services.install.domain.resolver import DependencyResolver
from devsetup.core.services.install.execution.checksum import compute_digest, verify_checksum
from devsetup.core.services.install.execution.verification import run_verification_suite
from devsetup.core.services.install.installers.builtin import build_default_registry
from devsetup.core.services.install.installers.registry import InstallerRegistry

logger = logging.getLogger(__name__)

# Backed up by --backup before anything is installed
CONFIG_FILES = (".bashrc", ".zshrc", ".profile")
SYSTEM_CONFIG_FILES = (Path("/etc/sysctl.conf"),)


class SetupOrchestrator:
    """Runs installers for a selection of components.

    Args:
        ctx: The run context.
        registry: Installers by name (default: the whole catalog).
        dependencies: component → prerequisite.
        recipes: Catalog used for interactive prompts and verification.
        confirm: Asks a yes/no question; used for interactive selection
            unless the context auto-approves.
    """

    def __init__(
        self,
        ctx: SetupContext,
        registry: InstallerRegistry | None = None,
        *,
        dependencies: Mapping[str, str] = DEPENDENCIES,
        recipes: Mapping[str, dict] = COMPONENT_RECIPES,
        confirm: Callable[[str], bool] | None = None,
    ):
        self.ctx = ctx
        self.registry = registry or build_default_registry()
        self.dependencies = dependencies
        self.recipes = recipes
        self._confirm = confirm
        self.receipts: dict[str, InstallReceipt] = {}
        self.resolver = DependencyResolver(
            dependencies,
            is_installed=ctx.state.is_installed,
            has_installer=self.registry.has,
            install=self.install_component,
        )

    # ── Preflight ───────────────────────────────────────────────

    def preflight(self, os_release: Path = OS_RELEASE) -> RequirementsReport:
        """Detect the platform and check host requirements.

        Raises:
            PlatformError: Unsupported or undetectable platform.
        """
        self.ctx.platform = detect_platform(os_release)
        return check_system_requirements()

    def backup_configs(self) -> list[Path]:
        """Back up the user's shell files and system config before changes."""
        home = self.ctx.user.home
        paths = [home / name for name in CONFIG_FILES] + list(SYSTEM_CONFIG_FILES)
        return self.ctx.backups.backup_all(paths)

    # ── Selection ───────────────────────────────────────────────

    def select_interactive(self) -> list[str]:
        """Offer every catalog component in order."""
        chosen = []
        for name, recipe in self.recipes.items():
            question = recipe.get("prompt", f"Install {recipe.get('label', name)}?")
            if self.ctx.auto_approve or (self._confirm is not None and self._confirm(question)):
                chosen.append(name)
        return chosen

    # ── Install ─────────────────────────────────────────────────

    def install_component(self, name: str) -> InstallReceipt:
        """Install one component (and its prerequisite) and record it.

        Each component runs at most once per run; later requests get the
        first receipt.
        """
        if name in self.receipts:
            return self.receipts[name]

        resolution = self.resolver.resolve(name)
        if resolution.blocked:
            return self._finish(InstallReceipt.failure(
                name,
                str(resolution.error),
                metadata={"blocked_by": resolution.prerequisite},
            ))

        if self.ctx.state.is_installed(name):
            receipt = self._refresh_installed(name)
        else:
            receipt = self.registry.run(name, self.ctx)
            if receipt.ok and not self.ctx.dry_run:
                receipt = self._record(receipt)

        if resolution.status == "unresolvable":
            receipt.warnings.append(str(resolution.error))
        return self._finish(receipt)

    def _refresh_installed(self, name: str) -> InstallReceipt:
        """Skip an installed component, re-deriving its version."""
        logger.info("%s already installed", name)
        installer = self.registry.get(name)
        version = installer.detect_version(self.ctx) if installer else None
        warnings = []
        if version and version != self.ctx.state.installed_version(name):
            try:
                self.ctx.state.mark_installed(name, version)
            except StateWriteFailed as e:
                logger.warning("%s", e)
                warnings.append(str(e))
        return InstallReceipt.skip(
            name,
            "already installed",
            version=version or self.ctx.state.installed_version(name),
            warnings=warnings,
        )

    def _record(self, receipt: InstallReceipt) -> InstallReceipt:
        try:
            self.ctx.state.mark_installed(receipt.component, receipt.version or "unknown")
        except StateWriteFailed as e:
            logger.error("%s", e)
            return InstallReceipt.failure(
                receipt.component,
                str(e),
                version=receipt.version,
                warnings=receipt.warnings,
                duration_ms=receipt.duration_ms,
            )
        return receipt

    def _finish(self, receipt: InstallReceipt) -> InstallReceipt:
        self.receipts[receipt.component] = receipt
        self.ctx.progress.advance()
        return receipt

    def run(self, components: Iterable[str] | None = None) -> dict[str, Any]:
        """Install ``components`` (None: ask for each catalog component).

        Returns:
            Run summary: ``ok``, ``dry_run``, ``installed``, ``skipped``,
            ``failed`` (with errors), ``warnings``, ``receipts``,
            ``elapsed``, ``backups``, ``advisories``.
        """
        selected = list(components) if components is not None else self.select_interactive()
        if not selected:
            logger.info("Nothing selected")

        progress = self.ctx.progress
        progress.start()
        progress.set_total(
            estimate_total_tasks(selected, self.dependencies, self.ctx.state.is_installed)
        )

        try:
            for name in selected:
                self.install_component(name)
        finally:
            self.ctx.cleanup()

        summary = self.summary()
        advisories = account_advisories(self.ctx.user.home) if selected else []
        summary["advisories"] = advisories

        logger.info("Setup complete in %s", summary["elapsed"])
        if not self.ctx.dry_run and summary["installed"]:
            logger.warning("Please reboot your system to apply all changes")
        return summary

    def summary(self) -> dict[str, Any]:
        receipts = list(self.receipts.values())
        failed = [r for r in receipts if r.failed]
        return {
            "ok": not failed,
            "dry_run": self.ctx.dry_run,
            "installed": [r.component for r in receipts if r.ok],
            "skipped": [r.component for r in receipts if r.status == "skipped"],
            "failed": [{"component": r.component, "error": r.error} for r in failed],
            "warnings": [w for r in receipts for w in r.warnings],
            "receipts": [r.model_dump(mode="json") for r in receipts],
            "elapsed": fmt_elapsed(self.ctx.progress.elapsed_seconds()),
            "backups": [str(p) for p in self.ctx.backups.created],
            "state_file": str(self.ctx.state.path),
            "platform": self.ctx.platform.to_dict() if self.ctx.platform else None,
        }

    # ── Other modes ─────────────────────────────────────────────

    def verify(self, log_path: Path | None = None) -> dict[str, Any]:
        """Check every recorded component's tool answers ``--version``."""
        return run_verification_suite(
            self.ctx.state.installed, self.recipes, log_path, path=self.ctx.search_path,
        )


def run_self_test(os_release: Path = OS_RELEASE) -> dict[str, Any]:
    """Exercise platform detection, checksums and state on this host.

    Works in a temporary directory; the real state file is untouched.

    Returns:
        ``{"ok": bool, "checks": [{"name", "ok", "detail"}]}``.
    """
    logger.info("Running self-tests...")
    checks = []

    try:
        info = detect_platform(os_release)
        checks.append({"name": "platform detection", "ok": True,
                       "detail": f"{info.os_id} {info.version_id} ({info.arch})"})
    except PlatformError as e:
        checks.append({"name": "platform detection", "ok": False, "detail": str(e)})

    with tempfile.TemporaryDirectory(prefix="devsetup-selftest-") as tmp:
        sample = Path(tmp) / "checksum.txt"
        sample.write_text("test\n", encoding="utf-8")
        try:
            verify_checksum(sample, f"sha256:{compute_digest(sample)}")
            checks.append({"name": "checksum verification", "ok": True, "detail": ""})
        except ChecksumMismatch as e:
            checks.append({"name": "checksum verification", "ok": False, "detail": str(e)})

        store = StateStore(Path(tmp) / "state.json")
        try:
            store.mark_installed("test_component", "1.0.0")
            store.load()
            ok = store.is_installed("test_component")
            checks.append({"name": "state management", "ok": ok, "detail": ""})
        except StateWriteFailed as e:
            checks.append({"name": "state management", "ok": False, "detail": str(e)})

    for check in checks:
        if check["ok"]:
            logger.info("%s test PASSED", check["name"].capitalize())
        else:
            logger.error("%s test FAILED: %s", check["name"].capitalize(), check["detail"])

    failed = sum(1 for c in checks if not c["ok"])
    if failed:
        logger.error("%d self-test(s) FAILED", failed)
    else:
        logger.info("All self-tests PASSED")
    return {"ok": failed == 0, "checks": checks}
