"""
Installer base — the contract between the orchestrator and components.

Installers perform the side effects for one component and return
receipts.  A ``SetupError`` raised part-way (a failed critical step or
download) becomes a failed receipt in the registry, as does anything
else that slips through.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from devsetup.core.models.receipt import InstallReceipt

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext


class Installer(ABC):
    """Abstract base class for all installers.

    To add a component:
        1. Subclass Installer (or a RecipeInstaller kind)
        2. Implement name and install
        3. Register it in the InstallerRegistry
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The component identifier (e.g., 'docker', 'go')."""

    @property
    def label(self) -> str:
        """Human-readable name."""
        return self.name

    @abstractmethod
    def install(self, ctx: SetupContext) -> InstallReceipt:
        """Install the component (or preview it in dry-run).

        MUST be idempotent: a second call on a provisioned host changes
        nothing.
        """

    def detect_version(self, ctx: SetupContext) -> str | None:
        """Installed version; None when unknown."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
