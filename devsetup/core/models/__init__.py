"""
Domain models — Pydantic types for devsetup.

    from devsetup.core.models import InstallReceipt, InstallState, SetupConfig
"""

from devsetup.core.models.config import PathsConfig, SetupConfig
from devsetup.core.models.receipt import InstallReceipt
from devsetup.core.models.state import InstallState

__all__ = [
    "InstallReceipt",
    "InstallState",
    "PathsConfig",
    "SetupConfig",
]
