"""
Recipe installer — the shared install sequence for catalog components.

Every catalog component is a recipe (see ``data/recipes.py``).  The
sequence is the same for all kinds; subclasses only supply ``apply``:

    1. Skip the work if the recipe's ``check`` command is already present
    2. ``pre`` steps
    3. ``apply`` (kind-specific: apt, script, archive, deb, sysctl, steps)
    4. File edits (lines, blocks, files, replacements), ``post`` steps,
       services
    5. Notes, then a receipt with the detected (or fixed) version
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.models.receipt import InstallReceipt
from devsetup.core.services.install.detection.hardware import host_condition
from devsetup.core.services.install.detection.tool_version import get_tool_version
from devsetup.core.services.install.domain.errors import InstallStepFailed
from devsetup.core.services.install.execution.cache import cache_key
from devsetup.core.services.install.execution.file_edits import (
    chown_to_user,
    ensure_block,
    ensure_line,
    replace_in_file,
    write_file,
)
from devsetup.core.services.install.installers.base import Installer

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext

logger = logging.getLogger(__name__)


class RecipeInstaller(Installer):
    """Installer driven by a catalog recipe.

    Args:
        name: Component name.
        recipe: The component's recipe dict.
    """

    def __init__(self, name: str, recipe: dict):
        self._name = name
        self.recipe = recipe

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self.recipe.get("label", self._name)

    # ── Template ────────────────────────────────────────────────

    def install(self, ctx: SetupContext) -> InstallReceipt:
        check = self.recipe.get("check")
        if check and ctx.command_exists(check):
            logger.info("%s already installed", self.label)
            return InstallReceipt.success(
                self.name,
                version=self.resolve_version(ctx),
                output=f"{check} already present",
                metadata={"already_present": True},
            )

        self.run_steps(ctx, self.recipe.get("pre", []))
        self.apply(ctx)
        self.apply_file_edits(ctx)
        self.run_steps(ctx, self.recipe.get("post", []))
        self.enable_services(ctx)

        notes = [ctx.render(n) for n in self.recipe.get("notes", [])]
        for note in notes:
            logger.info("%s", note)

        return InstallReceipt.success(
            self.name,
            version=self.resolve_version(ctx),
            metadata={"notes": notes} if notes else {},
        )

    def apply(self, ctx: SetupContext) -> None:
        """Kind-specific work.  Raises InstallStepFailed on failure."""

    # ── Versions ────────────────────────────────────────────────

    def detect_version(self, ctx: SetupContext) -> str | None:
        version_cmd = self.recipe.get("version")
        if not version_cmd:
            return None
        cmd, pattern = version_cmd
        return get_tool_version(list(cmd), pattern, path=ctx.search_path)

    def resolve_version(self, ctx: SetupContext) -> str:
        """Detected version, else the recipe's fixed one, else "unknown"."""
        version = self.detect_version(ctx)
        if version:
            return version
        fixed = self.recipe.get("version_fixed")
        if fixed:
            return ctx.render(fixed)
        return ctx.version_for(self.name, self.recipe) or "unknown"

    # ── Shared steps ────────────────────────────────────────────

    def run_steps(self, ctx: SetupContext, steps: list[dict]) -> None:
        for step in steps:
            self.run_step(ctx, step)

    def run_step(self, ctx: SetupContext, step: dict, **extra: str) -> None:
        """Run one command step.

        Skipped when ``requires`` names a missing command, when a command
        in ``unless_command`` is present, when the ``unless_exists`` path
        exists, or when the ``when`` host condition does not hold.

        Raises:
            InstallStepFailed: A critical step failed.
        """
        requires = step.get("requires")
        if requires and not ctx.command_exists(requires):
            logger.info("%s not available, skipping: %s", requires, shlex.join(step["cmd"]))
            return

        present = step.get("unless_command", ())
        for command in [present] if isinstance(present, str) else present:
            if ctx.command_exists(command):
                logger.info("%s present, skipping: %s", command, shlex.join(step["cmd"]))
                return

        unless = step.get("unless_exists")
        if unless and Path(ctx.render(unless, **extra)).exists():
            logger.debug("%s exists, skipping step", ctx.render(unless, **extra))
            return

        when = step.get("when")
        if when and not host_condition(ctx.runner, when):
            logger.info("%s does not hold, skipping: %s", when, shlex.join(step["cmd"]))
            return

        cmd = [ctx.render(arg, **extra) for arg in step["cmd"]]
        result = ctx.runner.run(
            cmd,
            critical=step.get("critical", True),
            as_user=step.get("as_user", False),
        )
        if not result["ok"] and step.get("critical", True):
            detail = result.get("stderr") or result.get("error", "")
            raise InstallStepFailed(f"{shlex.join(cmd)}: {detail}".strip())

    def fetch(self, ctx: SetupContext, url: str, filename: str | None = None) -> Path:
        """Fetch ``url`` into the work dir through the download cache.

        Raises:
            InstallStepFailed: Download or verification failed.
        """
        destination = ctx.work_dir / (filename or cache_key(url))
        result = ctx.cache.fetch(url, destination, ctx.checksum_for(self.name))
        if not result.ok:
            raise InstallStepFailed(str(result.error))
        return destination

    def apply_file_edits(self, ctx: SetupContext) -> None:
        """Append lines and blocks, write files, apply text replacements.

        Every entry may carry ``requires`` (skip unless the command
        exists) and ``only_if_exists`` (skip unless the file exists);
        ``backup`` names the backup taken before the first change.
        """
        for entry in self._edit_entries(ctx, "lines"):
            ensure_line(
                Path(ctx.render(entry["path"])),
                ctx.render(entry["line"]),
                marker=entry.get("marker"),
                dry_run=ctx.dry_run,
                backups=ctx.backups if entry.get("backup") else None,
                backup_name=entry.get("backup"),
            )

        for entry in self._edit_entries(ctx, "blocks"):
            ensure_block(
                Path(ctx.render(entry["path"])),
                ctx.render(entry["text"]),
                marker=entry["marker"],
                dry_run=ctx.dry_run,
                backups=ctx.backups if entry.get("backup") else None,
                backup_name=entry.get("backup"),
            )

        for entry in self._edit_entries(ctx, "files"):
            path = Path(ctx.render(entry["path"]))
            written = write_file(
                path,
                entry["content"],
                mode=entry.get("mode"),
                overwrite=entry.get("overwrite", False),
                dry_run=ctx.dry_run,
            )
            if written and entry.get("as_user") and not ctx.dry_run:
                chown_to_user(path, ctx.user.name)

        for entry in self._edit_entries(ctx, "replacements"):
            replace_in_file(
                Path(ctx.render(entry["path"])),
                entry["old"],
                entry["new"],
                regex=entry.get("regex", False),
                dry_run=ctx.dry_run,
                backups=ctx.backups if entry.get("backup") else None,
                backup_name=entry.get("backup"),
            )

    def _edit_entries(self, ctx: SetupContext, field: str) -> list[dict]:
        entries = []
        for entry in self.recipe.get(field, []):
            requires = entry.get("requires")
            if requires and not ctx.command_exists(requires):
                logger.info("%s not available, leaving %s alone", requires, entry["path"])
                continue
            if entry.get("only_if_exists") and not Path(ctx.render(entry["path"])).exists():
                continue
            entries.append(entry)
        return entries

    def enable_services(self, ctx: SetupContext) -> None:
        for service in self.recipe.get("services", []):
            ctx.runner.run(["systemctl", "enable", "--now", service], critical=False)
