"""
Component selection — turn a profile, config toggles and explicit names
into the ordered list of components to install.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from devsetup.core.config.loader import ConfigError
from devsetup.core.models.config import SetupConfig
from devsetup.core.services.install.data.profiles import PROFILES
from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES

logger = logging.getLogger(__name__)


def catalog_order(names: Iterable[str]) -> list[str]:
    """Deduplicate and sort ``names`` by catalog position."""
    wanted = set(names)
    return [name for name in COMPONENT_RECIPES if name in wanted]


def select_components(
    config: SetupConfig | None = None,
    profile: str | None = None,
    explicit: Iterable[str] = (),
) -> list[str] | None:
    """Resolve the component list for a run.

    Precedence: explicit names, then ``profile`` (CLI) or the config's
    profile, then the config's component toggles.

    Returns:
        Components in catalog order, or None when nothing selects
        components (the run is interactive).

    Raises:
        ConfigError: Unknown profile or component name.
    """
    explicit = list(explicit)
    if explicit:
        unknown = sorted(set(explicit) - set(COMPONENT_RECIPES))
        if unknown:
            raise ConfigError(f"Unknown components: {', '.join(unknown)}")
        return catalog_order(explicit)

    profile_name = profile or (config.profile if config else None)
    toggles = config.components if config else {}

    if profile_name is None and not toggles:
        return None

    selected: set[str] = set()
    if profile_name is not None:
        if profile_name not in PROFILES:
            raise ConfigError(
                f"Unknown profile '{profile_name}' "
                f"(expected one of: {', '.join(PROFILES)})"
            )
        selected.update(PROFILES[profile_name])

    for name, enabled in toggles.items():
        if enabled:
            selected.add(name)
        else:
            selected.discard(name)

    components = catalog_order(selected)
    logger.info(
        "Selected %d components (profile=%s)", len(components), profile_name or "-",
    )
    return components
