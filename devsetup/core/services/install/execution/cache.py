"""
L4 Execution — Download cache.

Keeps a copy of every verified download under
``~/.cache/devsetup/downloads/<basename>`` so re-runs skip the network.

Entries are keyed by the URL's final path segment only: two URLs with the
same basename share one entry.  There is no expiry and no size bound.  A
cached file that fails checksum verification is deleted and fetched once
more.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from devsetup.core.services.install.data.constants import (
    CACHE_DOWNLOADS_DIR,
    DEFAULT_CACHE_DIR,
)
from devsetup.core.services.install.domain.checksum_spec import is_skipped, parse_checksum
from devsetup.core.services.install.domain.errors import (
    CacheWriteFailed,
    ChecksumMismatch,
    DownloadFailed,
    SetupError,
    UnsupportedAlgorithm,
)
from devsetup.core.services.install.domain.formatting import fmt_size
from devsetup.core.services.install.execution.checksum import verify_checksum
from devsetup.core.services.install.execution.download import Fetcher

logger = logging.getLogger(__name__)


def get_cache_dir() -> Path:
    """Return the cache root (``DEVSETUP_CACHE_DIR`` overrides the default)."""
    return Path(os.environ.get("DEVSETUP_CACHE_DIR", str(DEFAULT_CACHE_DIR)))


def cache_key(url: str) -> str:
    """File name used for ``url`` in the cache: its final path segment."""
    parsed = urlparse(url)
    name = Path(parsed.path).name
    return name or parsed.netloc or "download"


@dataclass
class FetchResult:
    """Outcome of ``DownloadCache.fetch``."""

    ok: bool
    url: str
    destination: Path
    from_cache: bool = False
    dry_run: bool = False
    error: SetupError | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "url": self.url,
            "destination": str(self.destination),
            "from_cache": self.from_cache,
            "dry_run": self.dry_run,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "warnings": self.warnings,
        }


class DownloadCache:
    """URL → local artifact cache with checksum re-verification.

    Args:
        root: Cache root; downloads live in ``root/downloads``.
        fetcher: Performs the network download (raises DownloadFailed).
        dry_run: Every fetch becomes a no-op success.
    """

    def __init__(
        self,
        root: Path | None = None,
        *,
        fetcher: Fetcher,
        dry_run: bool = False,
    ):
        self.root = root if root is not None else get_cache_dir()
        self._fetcher = fetcher
        self._dry_run = dry_run

    @property
    def downloads_dir(self) -> Path:
        return self.root / CACHE_DOWNLOADS_DIR

    def path_for(self, url: str) -> Path:
        return self.downloads_dir / cache_key(url)

    def is_cached(self, url: str) -> bool:
        return self.path_for(url).is_file()

    # ── Fetch ───────────────────────────────────────────────────

    def fetch(self, url: str, destination: Path, checksum: str | None = None) -> FetchResult:
        """Place the artifact for ``url`` at ``destination``.

        Cache hit: re-verify (when a checksum is given) and copy.
        Miss or stale hit: download, verify, then store a copy.
        """
        if self._dry_run:
            logger.info("[dry-run] Would fetch: %s -> %s", url, destination)
            return FetchResult(True, url, destination, dry_run=True)

        if not is_skipped(checksum):
            try:
                parse_checksum(checksum)
            except UnsupportedAlgorithm as e:
                logger.error("%s", e)
                return FetchResult(False, url, destination, error=e)

        cached = self.path_for(url)
        if cached.is_file():
            hit = self._use_cached(url, cached, destination, checksum)
            if hit is not None:
                return hit

        return self._download(url, cached, destination, checksum)

    def _use_cached(
        self,
        url: str,
        cached: Path,
        destination: Path,
        checksum: str | None,
    ) -> FetchResult | None:
        """Copy a valid cache entry to ``destination``; None means re-download."""
        logger.info("Using cached file: %s", cached.name)
        if checksum:
            try:
                verify_checksum(cached, checksum)
            except ChecksumMismatch:
                logger.warning("Cached file checksum mismatch, re-downloading...")
                cached.unlink(missing_ok=True)
                return None

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(cached, destination)
        except OSError as e:
            logger.error("Cannot copy cached %s to %s: %s", cached, destination, e)
            return FetchResult(False, url, destination, error=SetupError(str(e)))
        return FetchResult(True, url, destination, from_cache=True)

    def _download(
        self,
        url: str,
        cached: Path,
        destination: Path,
        checksum: str | None,
    ) -> FetchResult:
        try:
            self._fetcher(url, destination)
        except DownloadFailed as e:
            logger.error("%s", e)
            destination.unlink(missing_ok=True)
            return FetchResult(False, url, destination, error=e)

        if checksum:
            try:
                verify_checksum(destination, checksum)
            except ChecksumMismatch as e:
                destination.unlink(missing_ok=True)
                return FetchResult(False, url, destination, error=e)

        result = FetchResult(True, url, destination)
        try:
            cached.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(destination, cached)
            logger.debug("Cached: %s", cached.name)
        except OSError as e:
            err = CacheWriteFailed(f"Cannot cache {destination.name}: {e}")
            logger.warning("%s", err)
            result.warnings.append(str(err))
        return result

    # ── Maintenance ─────────────────────────────────────────────

    def stats(self) -> dict[str, Any]:
        """Location, file count and total size of the cache."""
        if not self.root.is_dir():
            return {
                "location": str(self.root),
                "exists": False,
                "files": 0,
                "size_bytes": 0,
                "size": fmt_size(0),
            }

        files = 0
        total = 0
        for path in self.root.rglob("*"):
            if path.is_file():
                total += path.stat().st_size
                if path.parent == self.downloads_dir:
                    files += 1
        return {
            "location": str(self.root),
            "exists": True,
            "files": files,
            "size_bytes": total,
            "size": fmt_size(total),
        }

    def clean(self) -> dict[str, Any]:
        """Remove the whole cache directory.

        Returns:
            ``{"ok": True, "removed_bytes": N}``; in dry-run nothing is
            removed and ``"dry_run": True`` is set.
        """
        info = self.stats()
        if not info["exists"]:
            logger.info("Cache directory does not exist")
            return {"ok": True, "removed_bytes": 0}

        if self._dry_run:
            logger.info("[dry-run] Would remove cache %s (%s)", self.root, info["size"])
            return {"ok": True, "removed_bytes": 0, "dry_run": True}

        try:
            shutil.rmtree(self.root)
        except OSError as e:
            logger.error("Failed to clean cache %s: %s", self.root, e)
            return {"ok": False, "error": str(e)}

        logger.info("Cache cleaned (%s)", info["size"])
        return {"ok": True, "removed_bytes": info["size_bytes"]}
