"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from devsetup.core.services.install.orchestration.orchestrator import (  # noqa: F401
    SetupOrchestrator,
    run_self_test,
)
