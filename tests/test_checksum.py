"""
Tests for checksum parsing and file verification.
"""

import hashlib
import logging
from pathlib import Path

import pytest

from devsetup.core.services.install.domain.checksum_spec import (
    ChecksumSpec,
    is_skipped,
    parse_checksum,
)
from devsetup.core.services.install.domain.errors import ChecksumMismatch, UnsupportedAlgorithm
from devsetup.core.services.install.execution.checksum import compute_digest, verify_checksum


def _flip(hex_digest: str) -> str:
    first = "1" if hex_digest[0] != "1" else "2"
    return first + hex_digest[1:]


class TestParseChecksum:
    def test_sha256(self):
        assert parse_checksum("sha256:abc") == ChecksumSpec("sha256", "abc")

    def test_sha512(self):
        assert parse_checksum("sha512:def").algorithm == "sha512"

    def test_unknown_algorithm(self):
        with pytest.raises(UnsupportedAlgorithm) as exc:
            parse_checksum("md5:abc")
        assert exc.value.algorithm == "md5"

    def test_missing_prefix_is_unsupported(self):
        """A bare digest has no algorithm and is rejected."""
        with pytest.raises(UnsupportedAlgorithm):
            parse_checksum("e3b0c44298fc1c149afbf4c8996fb924")

    def test_skip_values(self):
        assert is_skipped(None)
        assert is_skipped("")
        assert is_skipped("skip")
        assert not is_skipped("sha256:abc")


class TestVerifyChecksum:
    """Tests for verify_checksum against real files."""

    def test_round_trip_sha256(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"hello world\n")
        digest = hashlib.sha256(b"hello world\n").hexdigest()
        assert verify_checksum(path, f"sha256:{digest}") is True

    def test_round_trip_sha512(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"x" * 20000)
        digest = compute_digest(path, "sha512")
        assert digest == hashlib.sha512(b"x" * 20000).hexdigest()
        assert verify_checksum(path, f"sha512:{digest}")

    def test_flipped_character_mismatches(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"hello world\n")
        digest = _flip(compute_digest(path))

        with pytest.raises(ChecksumMismatch) as exc:
            verify_checksum(path, f"sha256:{digest}")
        assert exc.value.expected == digest
        assert exc.value.actual == compute_digest(path)

    def test_mismatch_logs_both_digests(self, tmp_path: Path, caplog):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        wrong = _flip(compute_digest(path))

        with caplog.at_level(logging.ERROR):
            with pytest.raises(ChecksumMismatch):
                verify_checksum(path, f"sha256:{wrong}")
        assert wrong in caplog.text
        assert compute_digest(path) in caplog.text

    def test_mismatch_leaves_file(self, tmp_path: Path):
        """Deleting the bad artifact is the caller's job."""
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        with pytest.raises(ChecksumMismatch):
            verify_checksum(path, "sha256:" + "0" * 64)
        assert path.exists()

    def test_comparison_is_case_sensitive(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        with pytest.raises(ChecksumMismatch):
            verify_checksum(path, f"sha256:{compute_digest(path).upper()}")

    def test_skip_passes_with_warning(self, tmp_path: Path, caplog):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        with caplog.at_level(logging.WARNING):
            assert verify_checksum(path, "skip") is True
        assert "Skipping checksum verification" in caplog.text

    def test_empty_expectation_passes(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        assert verify_checksum(path, "") is True

    def test_unsupported_algorithm(self, tmp_path: Path):
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"data")
        with pytest.raises(UnsupportedAlgorithm):
            verify_checksum(path, "md5:abc")
