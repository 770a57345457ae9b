"""
System installers — kernel parameters, ordered command steps and
gaming tweaks.
"""

from __future__ import annotations

import glob
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.services.install.execution.file_edits import ensure_line, file_contains
from devsetup.core.services.install.installers.apt import install_packages
from devsetup.core.services.install.installers.recipe import RecipeInstaller

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext

logger = logging.getLogger(__name__)

SYSCTL_CONF = Path("/etc/sysctl.conf")
CPUFREQ_ROOT = Path("/sys/devices/system/cpu")


class SysctlInstaller(RecipeInstaller):
    """Append missing ``key=value`` lines to sysctl.conf and apply them.

    The file is backed up once before the first change.
    """

    def __init__(self, name: str, recipe: dict, sysctl_conf: Path = SYSCTL_CONF):
        super().__init__(name, recipe)
        self.sysctl_conf = sysctl_conf

    def apply(self, ctx: SetupContext) -> None:
        settings = self.recipe.get("sysctl", {})
        missing = {
            key: value for key, value in settings.items()
            if not file_contains(self.sysctl_conf, f"{key}=")
        }

        if missing:
            ctx.backups.create_backup(self.sysctl_conf, "sysctl.conf")
            for key, value in missing.items():
                ensure_line(self.sysctl_conf, f"{key}={value}", marker=f"{key}=", dry_run=ctx.dry_run)
            self.run_step(ctx, {"cmd": ["sysctl", "-p"]})
        else:
            logger.info("%s already applied", self.label)

        for timer in self.recipe.get("timers", []):
            self.run_step(ctx, {"cmd": ["systemctl", "enable", "--now", timer], "critical": False})


class CommandInstaller(RecipeInstaller):
    """Packages (if any), then the recipe's ordered steps."""

    def apply(self, ctx: SetupContext) -> None:
        install_packages(ctx, self.recipe.get("packages", []))
        self.run_steps(ctx, self.recipe.get("steps", []))


class GamingInstaller(CommandInstaller):
    """Packages and steps, then CPU governor and shader cache tweaks.

    ``cpu_governor`` is written to every core's ``scaling_governor``
    (lost on reboot); ``clear_paths`` globs are removed from disk.
    """

    def __init__(self, name: str, recipe: dict, cpufreq_root: Path = CPUFREQ_ROOT):
        super().__init__(name, recipe)
        self.cpufreq_root = cpufreq_root

    def apply(self, ctx: SetupContext) -> None:
        super().apply(ctx)
        self.set_cpu_governor(ctx)
        self.clear_caches(ctx)

    def set_cpu_governor(self, ctx: SetupContext) -> None:
        governor = self.recipe.get("cpu_governor")
        if not governor:
            return
        files = sorted(self.cpufreq_root.glob("cpu*/cpufreq/scaling_governor"))
        if not files:
            logger.info("No cpufreq scaling governors found")
            return
        if ctx.dry_run:
            logger.info("[dry-run] Would set %d CPU governors to %s", len(files), governor)
            return

        for path in files:
            try:
                path.write_text(f"{governor}\n", encoding="utf-8")
            except OSError as e:
                logger.warning("Cannot set governor in %s: %s", path, e)
        logger.info("CPU governor set to %s", governor)

    def clear_caches(self, ctx: SetupContext) -> None:
        for pattern in self.recipe.get("clear_paths", []):
            for match in sorted(glob.glob(ctx.render(pattern))):
                path = Path(match)
                if ctx.dry_run:
                    logger.info("[dry-run] Would remove %s", path)
                elif path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path, ignore_errors=True)
                    logger.info("Removed %s", path)
                else:
                    path.unlink(missing_ok=True)
                    logger.info("Removed %s", path)
