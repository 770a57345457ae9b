"""
Installer registry — central dispatch for all component installs.

The registry is the single point of installer management: registration,
lookup, and running an installer into a receipt.  The orchestrator
never talks to installers directly.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from devsetup.core.models.receipt import InstallReceipt
from devsetup.core.services.install.domain.errors import SetupError
from devsetup.core.services.install.installers.base import Installer

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext

logger = logging.getLogger(__name__)


class InstallerRegistry:
    """Name → installer map with receipt-producing dispatch."""

    def __init__(self) -> None:
        self._installers: dict[str, Installer] = {}

    def register(self, installer: Installer) -> None:
        name = installer.name
        if name in self._installers:
            logger.warning("Overwriting existing installer: %s", name)
        self._installers[name] = installer
        logger.debug("Registered installer: %s", name)

    def unregister(self, name: str) -> None:
        """Remove an installer from the registry."""
        self._installers.pop(name, None)

    def get(self, name: str) -> Installer | None:
        """Look up an installer by name."""
        return self._installers.get(name)

    def has(self, name: str) -> bool:
        return name in self._installers

    def list_installers(self) -> list[str]:
        """List all registered installer names, in registration order."""
        return list(self._installers.keys())

    def run(self, name: str, ctx: SetupContext) -> InstallReceipt:
        """Run the installer for ``name`` and return its receipt.

        This is the main dispatch method.  It:
        1. Resolves the installer
        2. Runs it (dry-run installers only log what they would do)
        3. Converts escaped exceptions into failed receipts
        4. Marks dry-run successes as skipped
        5. Adds timing

        Never raises.
        """
        start_time = time.monotonic()

        installer = self._installers.get(name)
        if installer is None:
            return InstallReceipt.failure(
                component=name,
                error=f"No installer registered for '{name}'",
            )

        logger.info("Installing %s...", installer.label)
        warnings_before = len(ctx.runner.warnings)
        try:
            receipt = installer.install(ctx)
        except SetupError as e:
            receipt = InstallReceipt.failure(component=name, error=str(e))
        except Exception as e:
            # Bugs in an installer still end as a failed receipt
            logger.error("Installer %s raised during install: %s", name, e)
            receipt = InstallReceipt.failure(component=name, error=f"Unexpected error: {e}")

        for warning in ctx.runner.warnings[warnings_before:]:
            if warning not in receipt.warnings:
                receipt.warnings.append(warning)

        if ctx.dry_run and receipt.ok:
            receipt = InstallReceipt.skip(
                component=name,
                reason=f"[dry-run] Would install {installer.label}",
                version=receipt.version,
                warnings=receipt.warnings,
                metadata={**receipt.metadata, "dry_run": True},
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        if receipt.failed:
            logger.error("Failed to install %s: %s", installer.label, receipt.error)
        elif receipt.ok:
            logger.info("%s installed (%s)", installer.label, receipt.version or "unknown")
        return receipt
