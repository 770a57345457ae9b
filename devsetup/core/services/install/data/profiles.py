"""
L0 Data — Installation profiles.

A profile is a named bundle of components.  ``full`` selects the whole
catalog.
"""

from __future__ import annotations

from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES

PROFILES: dict[str, list[str]] = {
    "minimal": [
        "system_update",
        "common_dev_tools",
        "python",
        "zsh",
    ],
    "developer": [
        "system_update",
        "common_dev_tools",
        "system_tweaks",
        "java",
        "go",
        "rust",
        "python",
        "nodejs",
        "dotnet",
        "postgresql",
        "vscode",
        "docker",
        "kubectl",
        "helm",
        "terraform",
        "aws_cli",
        "github_cli",
        "zsh",
        "system_configuration",
    ],
    "gamer": [
        "system_update",
        "common_dev_tools",
        "discord",
        "steam",
        "gaming_optimization",
        "brave",
        "system_optimization",
    ],
    "full": list(COMPONENT_RECIPES),
}
