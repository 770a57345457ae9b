"""
Apt installer — packages from the distro or a vendor repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from devsetup.core.services.install.domain.errors import InstallStepFailed
from devsetup.core.services.install.execution.packages import add_apt_repository, apt_install
from devsetup.core.services.install.installers.recipe import RecipeInstaller

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext


class AptInstaller(RecipeInstaller):
    """Optional signed repository, then ``apt-get install``."""

    def apply(self, ctx: SetupContext) -> None:
        repo = self.recipe.get("repo")
        if repo:
            result = add_apt_repository(
                repo, runner=ctx.runner, work_dir=ctx.work_dir, render=ctx.render,
            )
            if not result["ok"]:
                raise InstallStepFailed(result["error"])

        install_packages(ctx, self.recipe.get("packages", []))


def install_packages(ctx: SetupContext, packages: list[str]) -> None:
    """``apt-get install -y`` rendered package names.

    Raises:
        InstallStepFailed: apt-get failed.
    """
    if not packages:
        return
    result = apt_install(ctx.runner, [ctx.render(p) for p in packages])
    if not result["ok"]:
        raise InstallStepFailed(
            f"apt-get install {' '.join(packages)} failed: "
            f"{result.get('stderr') or result.get('error', '')}".strip()
        )
