"""
L1 Domain — Checksum string parsing (pure).

No I/O.  Hashing lives in L4 (execution/checksum.py) because it reads
files.
"""

from __future__ import annotations

from typing import NamedTuple

from devsetup.core.services.install.data.constants import (
    CHECKSUM_SKIP,
    SUPPORTED_CHECKSUM_ALGORITHMS,
)
from devsetup.core.services.install.domain.errors import UnsupportedAlgorithm


class ChecksumSpec(NamedTuple):
    algorithm: str
    digest: str


def is_skipped(expected: str | None) -> bool:
    """True when the expected value disables verification."""
    return not expected or expected == CHECKSUM_SKIP


def parse_checksum(expected: str) -> ChecksumSpec:
    """Split ``<algo>:<hex>`` into its parts.

    Raises:
        UnsupportedAlgorithm: No ``algo:`` prefix, or an algorithm other
            than sha256/sha512.
    """
    algorithm, sep, digest = expected.partition(":")
    if not sep or algorithm not in SUPPORTED_CHECKSUM_ALGORITHMS:
        raise UnsupportedAlgorithm(algorithm if sep else "")
    return ChecksumSpec(algorithm, digest)
