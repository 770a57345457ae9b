"""
L0 Data — Component prerequisites.

Each component names at most one prerequisite.  Components not listed
have none.
"""

from __future__ import annotations

DEPENDENCIES: dict[str, str] = {
    "vscode": "common_dev_tools",
    "eclipse": "java",
    "helm": "kubectl",
}
