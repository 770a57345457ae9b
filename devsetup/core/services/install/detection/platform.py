"""
L3 Detection — Platform and host requirements.

Reads /etc/os-release and the dpkg architecture, and checks disk,
memory and connectivity before a run.
"""

from __future__ import annotations

import logging
import platform
import shutil
import socket
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from devsetup.core.services.install.data.constants import (
    ARCH_MAP,
    CONNECTIVITY_TARGET,
    CONNECTIVITY_TIMEOUT_SECONDS,
    MIN_FREE_DISK_GB,
    MIN_MEMORY_GB,
    SUPPORTED_PLATFORMS,
)
from devsetup.core.services.install.domain.errors import PlatformError

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")


@dataclass
class PlatformInfo:
    os_id: str
    version_id: str
    codename: str
    arch: str
    machine: str
    pretty_name: str = ""

    @property
    def supported(self) -> bool:
        versions = SUPPORTED_PLATFORMS.get(self.os_id, ())
        return any(self.version_id.startswith(v) for v in versions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "os": self.os_id,
            "version": self.version_id,
            "codename": self.codename,
            "arch": self.arch,
            "machine": self.machine,
            "supported": self.supported,
        }


def parse_os_release(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines, stripping optional quotes."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def detect_arch() -> str:
    """dpkg architecture, falling back to a mapped ``uname -m``."""
    if shutil.which("dpkg"):
        try:
            result = subprocess.run(
                ["dpkg", "--print-architecture"],
                capture_output=True, text=True, timeout=5,
            )
            if result.returncode == 0 and result.stdout.strip():
                return result.stdout.strip()
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("dpkg --print-architecture failed: %s", e)
    machine = platform.machine()
    return ARCH_MAP.get(machine, machine)


def read_platform(os_release: Path = OS_RELEASE) -> PlatformInfo:
    """Read platform facts without judging support.

    Raises:
        PlatformError: os-release is missing or unreadable.
    """
    try:
        values = parse_os_release(os_release.read_text(encoding="utf-8"))
    except OSError as e:
        raise PlatformError(f"Cannot detect OS. {os_release} not readable: {e}") from e

    return PlatformInfo(
        os_id=values.get("ID", ""),
        version_id=values.get("VERSION_ID", ""),
        codename=values.get("VERSION_CODENAME") or values.get("UBUNTU_CODENAME", ""),
        arch=detect_arch(),
        machine=platform.machine(),
        pretty_name=values.get("PRETTY_NAME", ""),
    )


def detect_platform(os_release: Path = OS_RELEASE) -> PlatformInfo:
    """Detect the platform and require a supported one.

    Raises:
        PlatformError: os-release missing, or not Pop!_OS / Ubuntu
            22.04 / 24.04.
    """
    logger.info("Detecting platform...")
    info = read_platform(os_release)
    logger.info("Platform: %s %s (%s)", info.os_id, info.version_id, info.arch)

    if not info.supported:
        raise PlatformError(
            f"Unsupported platform: {info.os_id} {info.version_id} "
            "(supported: Pop!_OS and Ubuntu 22.04/24.04)"
        )
    logger.info("Platform supported")
    return info


# ── Host requirements ───────────────────────────────────────────


@dataclass
class RequirementsReport:
    free_disk_gb: int
    memory_gb: int
    online: bool
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Connectivity is required; low disk or memory only warn."""
        return self.online

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "free_disk_gb": self.free_disk_gb,
            "memory_gb": self.memory_gb,
            "online": self.online,
            "warnings": self.warnings,
        }


def _memory_gb(meminfo: Path = Path("/proc/meminfo")) -> int:
    try:
        for line in meminfo.read_text(encoding="utf-8").splitlines():
            if line.startswith("MemTotal:"):
                kib = int(line.split()[1])
                return kib // (1024 * 1024)
    except (OSError, ValueError, IndexError) as e:
        logger.debug("Cannot read %s: %s", meminfo, e)
    return 0


def check_connectivity(
    host: str = CONNECTIVITY_TARGET[0],
    port: int = CONNECTIVITY_TARGET[1],
    timeout: float = CONNECTIVITY_TIMEOUT_SECONDS,
) -> bool:
    """Open a TCP connection to a public resolver."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def check_system_requirements(root: Path = Path("/")) -> RequirementsReport:
    """Check free disk, memory and connectivity."""
    logger.info("Checking system requirements...")

    free_gb = shutil.disk_usage(root).free // (1024 ** 3)
    memory_gb = _memory_gb()
    online = check_connectivity()
    report = RequirementsReport(free_gb, memory_gb, online)

    if free_gb < MIN_FREE_DISK_GB:
        report.warnings.append(
            f"Low disk space: {free_gb}GB free (recommended: {MIN_FREE_DISK_GB}GB+)"
        )
    if memory_gb < MIN_MEMORY_GB:
        report.warnings.append(
            f"Low memory: {memory_gb}GB (recommended: {MIN_MEMORY_GB}GB+)"
        )
    for warning in report.warnings:
        logger.warning("%s", warning)

    if online:
        logger.info("Internet connectivity OK")
    else:
        logger.error("No internet connectivity detected")
    return report
