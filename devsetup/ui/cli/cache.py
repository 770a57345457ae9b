"""
CLI commands for the download cache.

Thin wrappers over ``devsetup.core.services.install.execution.cache``.
"""

from __future__ import annotations

import json
import sys

import click

from devsetup.ui.cli.helpers import load_cli_config


def _cache(ctx: click.Context):
    from devsetup.core.services.install.execution.cache import DownloadCache, get_cache_dir
    from devsetup.core.services.install.execution.download import make_fetcher
    from devsetup.core.services.install.execution.subprocess_runner import CommandRunner

    config = load_cli_config(ctx)
    root = config.paths.cache_dir if config and config.paths.cache_dir else get_cache_dir()
    return DownloadCache(root, fetcher=make_fetcher(CommandRunner()))


@click.group()
def cache() -> None:
    """Download cache — inspect and clean cached artifacts."""


@cache.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def stats(ctx: click.Context, as_json: bool) -> None:
    """Show cache location, file count and size."""
    info = _cache(ctx).stats()

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    click.secho("📦 Download cache", fg="cyan", bold=True)
    click.echo(f"   Location: {info['location']}")
    if not info["exists"]:
        click.secho("   Cache directory does not exist", fg="yellow")
        return
    click.echo(f"   Files:    {info['files']}")
    click.echo(f"   Size:     {info['size']}")


@cache.command()
@click.option("--yes", "-y", "auto_approve", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clean(ctx: click.Context, auto_approve: bool) -> None:
    """Remove every cached download."""
    store = _cache(ctx)
    info = store.stats()
    if not info["exists"]:
        click.secho("Cache directory does not exist", fg="yellow")
        return

    if not auto_approve and not click.confirm(
        f"Remove {info['files']} cached files ({info['size']})?", default=False,
    ):
        click.echo("Aborted.")
        return

    result = store.clean()
    if not result["ok"]:
        click.secho(f"❌ {result['error']}", fg="red")
        sys.exit(1)
    click.secho(f"✅ Cache cleaned ({info['size']})", fg="green")
