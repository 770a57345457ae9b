"""
devsetup — CLI entrypoint.

Usage:
    devsetup --help
    devsetup install --profile developer --dry-run
    devsetup list
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from devsetup import __version__
from devsetup.core.observability.logging_config import (
    add_run_log_file,
    remove_run_log_file,
    run_log_path,
    setup_logging,
)
from devsetup.core.services.install.data.profiles import PROFILES
from devsetup.ui.cli.helpers import load_cli_config

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="devsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to devsetup.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """devsetup — provision a Pop!_OS / Ubuntu developer workstation."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("DEVSETUP_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("DEVSETUP_LOG_FILE"),
        log_file_level=os.environ.get("DEVSETUP_LOG_FILE_LEVEL"),
    )


def _log_dir(context) -> Path:
    from devsetup.core.services.install.data.constants import DEFAULT_LOG_DIR

    return context.log_dir or DEFAULT_LOG_DIR


def _render_progress(snapshot) -> None:
    line = snapshot.render()
    if not line:
        return
    click.echo(line, nl=False)
    if snapshot.final:
        click.echo()


@cli.command()
@click.argument("components", nargs=-1)
@click.option("--yes", "-y", "auto_approve", is_flag=True, help="Answer yes to every prompt.")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be done; change nothing.")
@click.option(
    "--profile", "-p",
    type=click.Choice(list(PROFILES)),
    default=None,
    help="Install a predefined bundle of components.",
)
@click.option("--backup", "-b", is_flag=True, help="Back up shell and system config first.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    components: tuple[str, ...],
    auto_approve: bool,
    dry_run: bool,
    profile: str | None,
    backup: bool,
    as_json: bool,
) -> None:
    """Install components.

    COMPONENTS are catalog names (see ``devsetup profiles``).  Without
    components, profile or config toggles, every component is offered
    interactively.

    Examples:

        devsetup install docker helm

        devsetup install --profile developer --dry-run
    """
    from devsetup.core.config.loader import ConfigError
    from devsetup.core.config.selection import select_components
    from devsetup.core.context import build_context
    from devsetup.core.services.install.domain.errors import PlatformError
    from devsetup.core.services.install.domain.progress import ProgressTracker
    from devsetup.core.services.install.orchestration import SetupOrchestrator

    config = load_cli_config(ctx)
    try:
        selected = select_components(config, profile, components)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    show_progress = not as_json and not ctx.obj.get("quiet")
    progress = ProgressTracker(on_update=_render_progress if show_progress else None)
    context = build_context(
        config, dry_run=dry_run, auto_approve=auto_approve, progress=progress,
    )

    handler = None
    if not dry_run:
        log_path = run_log_path(_log_dir(context), "setup")
        try:
            handler = add_run_log_file(log_path)
            logger.info("Log file: %s", log_path)
        except OSError as e:
            logger.warning("Cannot open run log %s: %s", log_path, e)

    try:
        orchestrator = SetupOrchestrator(
            context, confirm=lambda question: click.confirm(question, default=False),
        )
        try:
            report = orchestrator.preflight()
        except PlatformError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

        if not report.ok and not context.auto_approve:
            if not click.confirm("No internet connectivity detected. Continue anyway?", default=False):
                sys.exit(1)

        if backup:
            orchestrator.backup_configs()

        summary = orchestrator.run(selected)
    finally:
        if handler is not None:
            remove_run_log_file(handler)

    if as_json:
        click.echo(json.dumps(summary, indent=2))
        sys.exit(0 if summary["ok"] else 1)

    prefix = "[dry-run] " if dry_run else ""
    click.echo()
    click.secho(f"{prefix}=== Setup Complete ===", fg="green" if summary["ok"] else "yellow", bold=True)
    click.echo(f"   Time elapsed: {summary['elapsed']}")
    for name in summary["installed"]:
        click.secho(f"   ✅ {name}", fg="green")
    for name in summary["skipped"]:
        click.echo(f"   ⏭️  {name}")
    for failure in summary["failed"]:
        click.secho(f"   ❌ {failure['component']}: {failure['error']}", fg="red")

    if summary["warnings"]:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warning in summary["warnings"]:
            click.echo(f"   • {warning}")

    if summary["backups"]:
        click.echo(f"\n   Backup files created: {len(summary['backups'])}")
    for advice in summary.get("advisories", []):
        click.secho(f"   💡 {advice}", fg="cyan")

    if not summary["ok"]:
        sys.exit(1)


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List installed components and their versions."""
    from devsetup.core.context import resolve_state_dir
    from devsetup.core.persistence.state_file import StateStore, default_state_path

    config = load_cli_config(ctx)
    store = StateStore(default_state_path(resolve_state_dir(config)), dry_run=True)
    store.load()
    installed = store.installed

    if as_json:
        click.echo(json.dumps({
            "state_file": str(store.path),
            "last_run": store.last_run,
            "installed": installed,
        }, indent=2))
        return

    if not installed:
        click.echo("No components installed yet")
        return

    click.echo()
    click.echo(f"{'COMPONENT':<20} VERSION")
    click.echo(f"{'-' * 19:<20} {'-' * 19}")
    for name, version in sorted(installed.items()):
        click.echo(f"{name:<20} {version}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def verify(ctx: click.Context, as_json: bool) -> None:
    """Check that installed tools respond to --version."""
    from devsetup.core.context import build_context
    from devsetup.core.services.install.orchestration import SetupOrchestrator

    config = load_cli_config(ctx)
    context = build_context(config, dry_run=True)
    log_path = run_log_path(_log_dir(context), "verification")
    result = SetupOrchestrator(context).verify(log_path)

    if as_json:
        click.echo(json.dumps(result, indent=2))
        sys.exit(0 if result["ok"] else 1)

    icons = {"pass": "✅", "warn": "⚠️ ", "fail": "❌"}
    colors = {"pass": "green", "warn": "yellow", "fail": "red"}
    for item in result["results"]:
        click.secho(
            f"   {icons[item['status']]} {item['component']}: {item['output'] or item['command']}",
            fg=colors[item["status"]],
        )
    click.echo()
    click.echo(
        f"   {result['passed']} passed, {result['warned']} warnings, {result['failed']} failed"
    )
    click.echo(f"   Log: {result['log']}")
    if not result["ok"]:
        sys.exit(1)


@cli.command()
@click.pass_context
def rollback(ctx: click.Context) -> None:
    """Show how to undo changes manually (automatic rollback is not supported)."""
    from devsetup.core.context import resolve_state_dir
    from devsetup.core.persistence.transaction_log import DEFAULT_TRANSACTION_FILE
    from devsetup.core.services.install.execution.backup import get_backup_dir

    config = load_cli_config(ctx)
    backup_dir = config.paths.backup_dir if config and config.paths.backup_dir else get_backup_dir()

    click.secho("⚠️  Rollback functionality not yet fully implemented", fg="yellow")
    click.echo("To manually rollback:")
    click.echo(f"  1. Check transaction log: {resolve_state_dir(config) / DEFAULT_TRANSACTION_FILE}")
    click.echo(f"  2. Review backups in: {backup_dir}")
    click.echo("  3. Restore files manually")
    sys.exit(1)


@cli.command("self-test")
def self_test() -> None:
    """Run built-in checks (platform, checksums, state)."""
    from devsetup.core.services.install.orchestration import run_self_test

    result = run_self_test()
    for check in result["checks"]:
        if check["ok"]:
            click.secho(f"   ✅ {check['name']}", fg="green")
        else:
            click.secho(f"   ❌ {check['name']}: {check['detail']}", fg="red")

    if result["ok"]:
        click.secho("All self-tests PASSED", fg="green", bold=True)
    else:
        click.secho("Self-tests FAILED", fg="red", bold=True)
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def profiles(as_json: bool) -> None:
    """List installation profiles and their components."""
    if as_json:
        click.echo(json.dumps(PROFILES, indent=2))
        return

    for name, members in PROFILES.items():
        click.secho(f"📋 {name} ({len(members)} components)", fg="cyan", bold=True)
        click.echo(f"   {', '.join(members)}")


# ── Sub-groups ──────────────────────────────────────────────────

from devsetup.ui.cli.cache import cache  # noqa: E402

cli.add_command(cache)


if __name__ == "__main__":
    cli()
