"""
Dependency resolver — install a component's prerequisite first.

Each component declares at most one prerequisite.  Resolution is
synchronous: the prerequisite installer runs to completion before the
dependent proceeds.

Outcomes:
    none          no prerequisite declared
    satisfied     prerequisite already installed
    installed     prerequisite installed (or previewed) just now
    unresolvable  prerequisite has no installer; warning, dependent proceeds
    failed        prerequisite installer failed; dependent is blocked
    cyclic        prerequisite chain loops back; dependent is blocked
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from devsetup.core.services.install.domain.errors import (
    CyclicDependency,
    DependencyUnresolvable,
    SetupError,
)

logger = logging.getLogger(__name__)

ResolutionStatus = Literal["none", "satisfied", "installed", "unresolvable", "failed", "cyclic"]


@dataclass
class Resolution:
    component: str
    prerequisite: str | None
    status: ResolutionStatus
    error: SetupError | None = None

    @property
    def blocked(self) -> bool:
        """Whether the dependent installation must not run."""
        return self.status in ("failed", "cyclic")


class DependencyResolver:
    """Resolves single-level prerequisites through an install callback.

    Args:
        dependencies: component → prerequisite name.
        is_installed: State lookup.
        has_installer: Whether a name maps to a registered installer.
        install: Runs the full install path for a name and returns a
            receipt-like object exposing ``failed`` and ``error``.
    """

    def __init__(
        self,
        dependencies: Mapping[str, str],
        *,
        is_installed: Callable[[str], bool],
        has_installer: Callable[[str], bool],
        install: Callable[[str], Any],
    ):
        self._dependencies = dependencies
        self._is_installed = is_installed
        self._has_installer = has_installer
        self._install = install
        self._active: list[str] = []

    def prerequisite_of(self, component: str) -> str | None:
        return self._dependencies.get(component) or None

    def resolve(self, component: str) -> Resolution:
        """Make sure ``component``'s prerequisite is installed."""
        dep = self.prerequisite_of(component)
        if dep is None:
            return Resolution(component, None, "none")

        if dep == component or dep in self._active:
            err = CyclicDependency([*self._active, component, dep])
            logger.error("%s", err)
            return Resolution(component, dep, "cyclic", err)

        if self._is_installed(dep):
            logger.debug("Dependency %s for %s already installed", dep, component)
            return Resolution(component, dep, "satisfied")

        if not self._has_installer(dep):
            err = DependencyUnresolvable(component, dep)
            logger.warning("%s — continuing with %s", err, component)
            return Resolution(component, dep, "unresolvable", err)

        logger.info("Resolving dependency: %s for %s", dep, component)
        self._active.append(component)
        try:
            receipt = self._install(dep)
        finally:
            self._active.pop()

        if receipt.failed:
            err = SetupError(
                f"Prerequisite {dep} for {component} failed: {receipt.error or 'unknown error'}"
            )
            logger.error("%s", err)
            return Resolution(component, dep, "failed", err)

        return Resolution(component, dep, "installed")
