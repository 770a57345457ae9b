"""
L4 Execution — Checksum verification.

Hashes files and compares against ``<algo>:<hex>`` expectations.
Reads the file and logs; no other side effects.  Deleting a bad
artifact is the caller's job.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from devsetup.core.services.install.data.constants import CHUNK_SIZE
from devsetup.core.services.install.domain.checksum_spec import is_skipped, parse_checksum
from devsetup.core.services.install.domain.errors import ChecksumMismatch

logger = logging.getLogger(__name__)


def compute_digest(path: Path, algorithm: str = "sha256") -> str:
    """Hex digest of ``path`` using ``algorithm``."""
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(path: Path, expected: str | None) -> bool:
    """Verify ``path`` against an expected ``<algo>:<hex>`` digest.

    An empty expectation or ``"skip"`` bypasses verification with a
    warning.  Hex digests are compared case-sensitively.

    Returns:
        True when the file matches or verification was skipped.

    Raises:
        UnsupportedAlgorithm: The algorithm is not sha256 or sha512.
        ChecksumMismatch: The digests differ.
    """
    if is_skipped(expected):
        logger.warning("Skipping checksum verification for %s", path)
        return True

    spec = parse_checksum(expected)
    logger.info("Verifying checksum for %s...", path.name)

    actual = compute_digest(path, spec.algorithm)
    if actual != spec.digest:
        logger.error("Checksum mismatch for %s", path)
        logger.error("Expected: %s", spec.digest)
        logger.error("Got:      %s", actual)
        raise ChecksumMismatch(str(path), spec.digest, actual)

    logger.info("Checksum verified: %s", path.name)
    return True
