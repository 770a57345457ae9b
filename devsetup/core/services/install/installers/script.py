"""
Script installer — vendor install scripts (rustup, helm, nodesource,
oh-my-zsh).

The script is fetched through the download cache, so a configured
checksum pins it.  Packages listed by the recipe are installed after
the script ran (nodesource adds the repository that provides them).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.services.install.installers.apt import install_packages
from devsetup.core.services.install.installers.recipe import RecipeInstaller

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext

logger = logging.getLogger(__name__)


class ScriptInstaller(RecipeInstaller):

    def apply(self, ctx: SetupContext) -> None:
        script = self.recipe["script"]

        creates = script.get("creates")
        if creates and Path(ctx.render(creates)).exists():
            logger.info("%s already set up (%s exists)", self.label, ctx.render(creates))
        else:
            path = self.fetch(ctx, ctx.render(script["url"]), script.get("filename"))
            if not ctx.dry_run:
                # Readable by the invoking user for as_user scripts
                path.chmod(0o755)
            self.run_step(
                ctx,
                {
                    "cmd": [script.get("shell", "sh"), str(path), *script.get("args", [])],
                    "as_user": script.get("as_user", False),
                },
            )

        install_packages(ctx, self.recipe.get("packages", []))
