"""
L1 Domain — Size and duration formatting (pure).

No I/O, no subprocess.
"""

from __future__ import annotations


def fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def fmt_eta(seconds: int) -> str:
    """Format an ETA: ``"3m 5s"`` above a minute, ``"42s"`` otherwise."""
    if seconds > 60:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds}s"


def fmt_elapsed(seconds: int) -> str:
    """Format a run duration as ``"<m>m <s>s"``."""
    return f"{seconds // 60}m {seconds % 60}s"
