"""
L3 Detection — Command presence and version probing.

Read-only checks: ``which`` lookups and ``--version`` style commands
parsed with a regex.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def search_path(extra: Iterable[str] = ()) -> str:
    """``$PATH`` extended with ``extra`` directories."""
    parts = [p for p in os.environ.get("PATH", "").split(os.pathsep) if p]
    for directory in extra:
        if directory not in parts:
            parts.append(directory)
    return os.pathsep.join(parts)


def command_exists(command: str, path: str | None = None) -> bool:
    """``command -v``: whether ``command`` is on the search path."""
    return shutil.which(command, path=path) is not None


def get_tool_version(
    cmd: list[str],
    pattern: str,
    path: str | None = None,
    timeout: int = 10,
) -> str | None:
    """Run ``cmd`` and return the first regex group found in its output.

    Returns:
        The version string, or None if the command is missing, fails to
        run, or prints nothing matching.
    """
    exe = shutil.which(cmd[0], path=path)
    if exe is None:
        return None

    try:
        result = subprocess.run(
            [exe, *cmd[1:]], capture_output=True, text=True, timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("Version check %s failed: %s", cmd, e)
        return None

    # Some tools (javac -version) print to stderr
    output = (result.stdout or "") + (result.stderr or "")
    match = re.search(pattern, output, re.MULTILINE)
    if match:
        return match.group(1) if match.groups() else match.group(0)
    return None
