"""
Shared helpers for CLI commands.
"""

from __future__ import annotations

import sys

import click

from devsetup.core.config.loader import ConfigError, find_config_file, load_config
from devsetup.core.models.config import SetupConfig


def load_cli_config(ctx: click.Context) -> SetupConfig | None:
    """Load ``--config`` (or an auto-detected devsetup.yml).

    Exits with status 1 on an invalid configuration.
    """
    path = ctx.obj.get("config_path") or find_config_file()
    if path is None:
        return None
    try:
        return load_config(path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
