"""Main CLI entry point for tokenkeeper."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from tokenkeeper import __version__
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.utils.config import load_config, parse_cookie_pairs


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    from tokenkeeper.ui.console import err_console

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _resolve_config(ctx: click.Context) -> ManagerConfig:
    obj = ctx.obj or {}
    overrides: dict[str, object] = {"base_url": obj.get("base_url")}
    try:
        cookies = parse_cookie_pairs(obj.get("cookies", ()))
        if cookies:
            overrides["cookies"] = cookies
        return load_config(obj.get("config_path"), overrides=overrides)
    except (FileNotFoundError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="tokenkeeper")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.yaml (defaults to .tokenkeeper/config.yaml when present)",
)
@click.option("--base-url", help="Base URL of the auth intermediary")
@click.option(
    "--cookie",
    "cookies",
    multiple=True,
    help="Credential cookie as NAME=VALUE (repeatable)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_path: Path | None,
    base_url: str | None,
    cookies: tuple[str, ...],
) -> None:
    """Keep a dashboard session's access credential alive."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["base_url"] = base_url
    ctx.obj["cookies"] = cookies
    _configure_logging(verbose)


@cli.command("status")
@click.option("--json", "as_json", is_flag=True, help="Emit the raw status as JSON")
@click.pass_context
def status_cmd(ctx: click.Context, as_json: bool) -> None:
    """Probe the intermediary once and show the credential status."""
    from tokenkeeper.cli.status import run_status

    run_status(_resolve_config(ctx), as_json=as_json)


@cli.command("refresh")
@click.option("--json", "as_json", is_flag=True, help="Emit the outcome as JSON")
@click.pass_context
def refresh_cmd(ctx: click.Context, as_json: bool) -> None:
    """Renew the credential pair now.

    Exits 1 on a transient failure and 2 when the renewal credential was
    rejected and the user must sign in again.
    """
    from tokenkeeper.cli.refresh import run_refresh

    run_refresh(_resolve_config(ctx), as_json=as_json)


@cli.command("watch")
@click.option(
    "--duration",
    type=click.FloatRange(min=0, min_open=True),
    help="Stop after this many seconds (default: run until interrupted)",
)
@click.pass_context
def watch_cmd(ctx: click.Context, duration: float | None) -> None:
    """Run the lifecycle manager and print every status change."""
    from tokenkeeper.cli.watch import run_watch

    run_watch(_resolve_config(ctx), duration=duration)


@cli.command("inspect")
@click.argument("metadata_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Emit the verdict as JSON")
def inspect_cmd(metadata_file: Path, as_json: bool) -> None:
    """Evaluate a session metadata file against the timeout policy."""
    from tokenkeeper.cli.status import run_inspect

    run_inspect(metadata_file, as_json=as_json)


if __name__ == "__main__":
    cli()
