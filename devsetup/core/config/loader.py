"""
Configuration loader — reads devsetup.yml into a SetupConfig.

Reads YAML, validates against the Pydantic schema, and checks profile
and component names against the catalog.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from devsetup.core.models.config import SetupConfig
from devsetup.core.services.install.data.profiles import PROFILES
from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES

logger = logging.getLogger(__name__)

# Default config filename
SETUP_CONFIG_FILE = "devsetup.yml"


class ConfigError(Exception):
    """Raised when the setup configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for devsetup.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to devsetup.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETUP_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path) -> SetupConfig:
    """Load and validate a setup configuration.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated SetupConfig.

    Raises:
        ConfigError: If the file is missing, unparsable, or names an
            unknown profile or component.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading setup config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = SetupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid setup configuration: {e}") from e

    validate_names(config)
    logger.info(
        "Loaded config %s (profile=%s, %d component overrides)",
        path, config.profile or "-", len(config.components),
    )
    return config


def validate_names(config: SetupConfig) -> None:
    """Reject unknown profile or component names.

    Raises:
        ConfigError: On the first unknown name.
    """
    if config.profile is not None and config.profile not in PROFILES:
        raise ConfigError(
            f"Unknown profile '{config.profile}' "
            f"(expected one of: {', '.join(PROFILES)})"
        )
    unknown = sorted(set(config.components) - set(COMPONENT_RECIPES))
    if unknown:
        raise ConfigError(f"Unknown components in config: {', '.join(unknown)}")
