"""
Built-in installers — one registered installer per catalog recipe.
"""

from __future__ import annotations

from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES
from devsetup.core.services.install.installers.apt import AptInstaller
from devsetup.core.services.install.installers.archive import ArchiveInstaller, DebInstaller
from devsetup.core.services.install.installers.recipe import RecipeInstaller
from devsetup.core.services.install.installers.registry import InstallerRegistry
from devsetup.core.services.install.installers.script import ScriptInstaller
from devsetup.core.services.install.installers.system import (
    CommandInstaller,
    GamingInstaller,
    SysctlInstaller,
)

INSTALLER_KINDS: dict[str, type[RecipeInstaller]] = {
    "apt": AptInstaller,
    "script": ScriptInstaller,
    "archive": ArchiveInstaller,
    "deb": DebInstaller,
    "sysctl": SysctlInstaller,
    "commands": CommandInstaller,
    "gaming": GamingInstaller,
}


def build_installer(name: str, recipe: dict) -> RecipeInstaller:
    """Instantiate the installer class for a recipe's ``kind``."""
    try:
        cls = INSTALLER_KINDS[recipe["kind"]]
    except KeyError as e:
        raise ValueError(f"Recipe {name} has unknown kind {recipe.get('kind')!r}") from e
    return cls(name, recipe)


def build_default_registry(recipes: dict[str, dict] | None = None) -> InstallerRegistry:
    """Registry with an installer for every recipe in the catalog."""
    registry = InstallerRegistry()
    for name, recipe in (recipes or COMPONENT_RECIPES).items():
        registry.register(build_installer(name, recipe))
    return registry
