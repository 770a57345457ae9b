"""
L3 Detection — Post-run account checks.

Advisory only: a missing git identity, SSH key or GPG signing key is
reported, never fixed.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

SSH_KEY_NAMES = ("id_ed25519", "id_ecdsa", "id_rsa")


def git_email_configured(home: Path) -> bool:
    """Whether ``git config --global user.email`` is set for ``home``."""
    if not shutil.which("git"):
        return False
    try:
        result = subprocess.run(
            ["git", "config", "--global", "user.email"],
            capture_output=True, text=True, timeout=5,
            env={"HOME": str(home), "PATH": "/usr/bin:/bin:/usr/local/bin"},
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("git config lookup failed: %s", e)
        return False
    return result.returncode == 0 and bool(result.stdout.strip())


def ssh_key_present(home: Path) -> bool:
    ssh_dir = home / ".ssh"
    return any((ssh_dir / name).is_file() for name in SSH_KEY_NAMES)


def gpg_secret_key_present(home: Path) -> bool:
    """Whether ``gpg --list-secret-keys`` shows a key in ``home``'s keyring."""
    if not shutil.which("gpg"):
        return False
    try:
        result = subprocess.run(
            ["gpg", "--batch", "--list-secret-keys"],
            capture_output=True, text=True, timeout=10,
            env={
                "HOME": str(home),
                "GNUPGHOME": str(home / ".gnupg"),
                "PATH": "/usr/bin:/bin:/usr/local/bin",
            },
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("gpg key lookup failed: %s", e)
        return False
    return result.returncode == 0 and any(
        line.startswith("sec") for line in result.stdout.splitlines()
    )


def account_advisories(home: Path) -> list[str]:
    """Return the follow-up messages for the user's account."""
    advice = []
    if not git_email_configured(home):
        advice.append(
            "Git not configured. Run: git config --global user.email 'you@example.com'"
        )
    if not ssh_key_present(home):
        advice.append(
            "SSH key not found. Generate one: ssh-keygen -t ed25519 -C 'you@example.com'"
        )
    if not gpg_secret_key_present(home):
        advice.append(
            "No GPG key found. Generate one: gpg --full-gen-key, then "
            "git config --global user.signingkey <KEY_ID>"
        )
    for message in advice:
        logger.info("%s", message)
    return advice
