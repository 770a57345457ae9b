"""
L1 Domain — Install error taxonomy.

Raised inside the install layers and converted to receipts or warnings
at the installer boundary.  Nothing here escapes a full run except
``PlatformError``, which aborts it.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base class for provisioning failures."""


class UnsupportedAlgorithm(SetupError):
    """Checksum string names an algorithm other than sha256/sha512."""

    def __init__(self, algorithm: str):
        super().__init__(f"Unsupported checksum algorithm: {algorithm or '(none)'}")
        self.algorithm = algorithm


class ChecksumMismatch(SetupError):
    """File digest differs from the expected digest."""

    def __init__(self, path: str, expected: str, actual: str):
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class DownloadFailed(SetupError):
    """Network fetch did not produce a file."""

    def __init__(self, url: str, reason: str = ""):
        message = f"Failed to download {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url
        self.reason = reason


class CacheWriteFailed(SetupError):
    """Copying a verified download into the cache failed (non-fatal)."""


class StateWriteFailed(SetupError):
    """The state file could not be persisted."""


class DependencyUnresolvable(SetupError):
    """Declared prerequisite has no registered installer."""

    def __init__(self, component: str, prerequisite: str):
        super().__init__(f"Unknown dependency '{prerequisite}' for {component}")
        self.component = component
        self.prerequisite = prerequisite


class CyclicDependency(SetupError):
    """Dependency resolution reached a component already being resolved."""

    def __init__(self, chain: list[str]):
        super().__init__(f"Cyclic dependency: {' -> '.join(chain)}")
        self.chain = chain


class PlatformError(SetupError):
    """Host platform is missing or unsupported."""


class InstallStepFailed(SetupError):
    """A critical installer step (command, fetch, repository) failed."""
