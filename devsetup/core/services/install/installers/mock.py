"""
Mock installer — test double for a component installer.

Touches nothing on the host.  Succeeds by default; can be configured
to fail, to raise, or to report a specific version.  Several mocks can
share one ``call_log`` list to record install order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from devsetup.core.models.receipt import InstallReceipt
from devsetup.core.services.install.installers.base import Installer

if TYPE_CHECKING:
    from devsetup.core.context import SetupContext


class MockInstaller(Installer):
    """Universal mock installer for testing."""

    def __init__(
        self,
        name: str,
        version: str | None = "1.0",
        call_log: list[str] | None = None,
    ):
        self._name = name
        self._version = version
        self._call_log = call_log if call_log is not None else []
        self._failure: str | None = None
        self._raises: Exception | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[str]:
        """Names of every install call made through this log."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times this installer has run."""
        return self._call_log.count(self._name)

    def set_failure(self, error: str = "Mock failure") -> None:
        """Configure install to return a failed receipt."""
        self._failure = error

    def set_raises(self, exc: Exception) -> None:
        """Configure install to raise ``exc``."""
        self._raises = exc

    def install(self, ctx: SetupContext) -> InstallReceipt:
        self._call_log.append(self._name)
        if self._raises is not None:
            raise self._raises
        if self._failure is not None:
            return InstallReceipt.failure(self._name, self._failure)
        return InstallReceipt.success(
            self._name, version=self._version, output="[mock] installed",
            metadata={"mock": True},
        )

    def detect_version(self, ctx: SetupContext) -> str | None:
        return self._version
