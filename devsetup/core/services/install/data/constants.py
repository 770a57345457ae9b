"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

from pathlib import Path

# Checksum strings are ``<algo>:<hex>``; these are the accepted algos.
SUPPORTED_CHECKSUM_ALGORITHMS: tuple[str, ...] = ("sha256", "sha512")

# Expected-checksum sentinel that disables verification.
CHECKSUM_SKIP = "skip"

# Read size for hashing and copying.
CHUNK_SIZE = 8192

# ── Well-known locations ─────────────────────────────────────────

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "devsetup"
CACHE_DOWNLOADS_DIR = "downloads"

DEFAULT_BACKUP_DIR = Path.home() / ".devsetup-backups"
DEFAULT_LOG_DIR = Path.home() / ".local" / "state" / "devsetup" / "logs"

# ── Download tuning ──────────────────────────────────────────────

DEFAULT_DOWNLOAD_RETRIES = 3
DEFAULT_DOWNLOAD_CONNECTIONS = 16
DOWNLOAD_RETRY_WAIT_SECONDS = 3
DOWNLOAD_TIMEOUT_SECONDS = 600

# ── Host requirements ────────────────────────────────────────────

MIN_FREE_DISK_GB = 10
MIN_MEMORY_GB = 4
CONNECTIVITY_TARGET = ("8.8.8.8", 53)
CONNECTIVITY_TIMEOUT_SECONDS = 3

APT_LOCK_FILES: tuple[str, ...] = (
    "/var/lib/dpkg/lock-frontend",
    "/var/lib/apt/lists/lock",
    "/var/lib/dpkg/lock",
)
APT_LOCK_MAX_WAIT_SECONDS = 60
APT_LOCK_POLL_SECONDS = 2

SUPPORTED_PLATFORMS: dict[str, tuple[str, ...]] = {
    "pop": ("22.04", "24.04"),
    "ubuntu": ("22.04", "24.04"),
}

# Architecture name normalization (uname -m → dpkg style).
ARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "armv7l": "armhf",
}
