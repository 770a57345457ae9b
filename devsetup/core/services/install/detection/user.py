"""
L3 Detection — The account being provisioned.

Under ``sudo`` the work is for the invoking user, not root: their name
and home directory drive ``{user}``/``{home}`` in recipes and the
``as_user`` steps.
"""

from __future__ import annotations

import getpass
import logging
import os
import pwd
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserInfo:
    name: str
    home: Path

    @property
    def is_root(self) -> bool:
        return self.name == "root"


def get_user_info() -> UserInfo:
    """Resolve the real user (``SUDO_USER`` wins over ``USER``)."""
    name = os.environ.get("SUDO_USER") or os.environ.get("USER") or getpass.getuser()
    try:
        home = Path(pwd.getpwnam(name).pw_dir)
    except KeyError:
        logger.debug("No passwd entry for %s, using $HOME", name)
        home = Path(os.environ.get("HOME", str(Path.home())))
    return UserInfo(name=name, home=home)
