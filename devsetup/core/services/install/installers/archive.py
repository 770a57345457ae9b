"""
Archive and .deb installers — artifacts downloaded from vendor URLs.

Archives (Go tarball, AWS CLI zip) go through the download cache with
the configured checksum.  ``.deb`` files come from "latest" redirect
URLs, so they bypass the cache and use the multi-connection download.
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from devsetup.core.services.install.domain.errors import InstallStepFailed
from devsetup.core.services.install.execution.download import download_file_optimized
from devsetup.core.services.install.installers.apt import install_packages
from devsetup.core.services.install.installers.recipe import RecipeInstaller

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext

logger = logging.getLogger(__name__)


class ArchiveInstaller(RecipeInstaller):
    """Download, extract, and optionally run the bundled installer."""

    def apply(self, ctx: SetupContext) -> None:
        archive = self.recipe["archive"]
        version = ctx.version_for(self.name, self.recipe) or ""
        url = ctx.render(archive["url"], version=version)
        path = self.fetch(ctx, url)

        replaces = archive.get("replaces")
        if replaces:
            self.run_step(ctx, {"cmd": ["rm", "-rf", replaces]})

        extract_dir = ctx.work_dir / f"{self.name}-extract"
        if archive.get("format", "tar.gz") == "zip":
            self.run_step(ctx, {"cmd": ["unzip", "-q", "-o", str(path), "-d", str(extract_dir)]})
        else:
            target = archive.get("extract_to") or str(extract_dir)
            if target == str(extract_dir) and not ctx.dry_run:
                extract_dir.mkdir(parents=True, exist_ok=True)
            self.run_step(ctx, {"cmd": ["tar", "-C", target, "-xzf", str(path)]})

        install_cmd = archive.get("install_cmd")
        if install_cmd:
            self.run_step(ctx, {"cmd": install_cmd}, extract_dir=str(extract_dir))

        if archive.get("cleanup") and not ctx.dry_run:
            shutil.rmtree(extract_dir, ignore_errors=True)


class DebInstaller(RecipeInstaller):
    """Download a vendor ``.deb`` and install it with apt."""

    def apply(self, ctx: SetupContext) -> None:
        deb = self.recipe["deb"]
        destination = ctx.work_dir / deb["filename"]
        result = download_file_optimized(ctx.render(deb["url"]), destination, runner=ctx.runner)
        if not result["ok"]:
            raise InstallStepFailed(result["error"])

        install_packages(ctx, [str(destination)])
        if not ctx.dry_run:
            destination.unlink(missing_ok=True)
