"""
L3 Detection — Host conditions that gate individual recipe steps.

A step with ``"when": "<condition>"`` runs only if the condition holds
on this host:

    nvidia_gpu                 ``lspci`` lists an NVIDIA device
    gsettings_schema:<schema>  ``gsettings list-keys <schema>`` succeeds

Checks are read-only, run even in dry-run mode and answer through the
exit status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devsetup.core.services.install.execution.subprocess_runner import CommandRunner

logger = logging.getLogger(__name__)


def has_nvidia_gpu(runner: CommandRunner) -> bool:
    return runner.query(["sh", "-c", "lspci | grep -qi nvidia"])["ok"]


def gsettings_schema_installed(runner: CommandRunner, schema: str) -> bool:
    return runner.query(["gsettings", "list-keys", schema])["ok"]


def host_condition(runner: CommandRunner, condition: str) -> bool:
    """Evaluate a step's ``when`` condition.

    Raises:
        ValueError: Unknown condition name.
    """
    name, _, arg = condition.partition(":")
    if name == "nvidia_gpu":
        holds = has_nvidia_gpu(runner)
    elif name == "gsettings_schema" and arg:
        holds = gsettings_schema_installed(runner, arg)
    else:
        raise ValueError(f"Unknown step condition {condition!r}")
    logger.debug("Condition %s: %s", condition, holds)
    return holds
