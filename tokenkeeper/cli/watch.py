"""Watch command implementation."""

from __future__ import annotations

import asyncio
import sys

import click

from tokenkeeper.core.routes import AlwaysActiveGate
from tokenkeeper.core.scheduler import TokenLifecycleManager
from tokenkeeper.core.terminator import RedirectTerminator
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import SessionEvent
from tokenkeeper.ui.console import console, err_console
from tokenkeeper.ui.status import render_status_line

EXIT_TERMINATED = 2


async def watch(config: ManagerConfig, *, duration: float | None = None) -> bool:
    """Run the manager until ``duration`` elapses or the session ends.

    Returns True when the session was terminated.
    """
    ended = asyncio.Event()
    signin_url = f"{config.base_url}{config.signin_path}"

    def redirect(_path: str) -> None:
        err_console.print(f"[error]Session ended.[/error] Sign in again at {signin_url}")
        ended.set()

    terminator = RedirectTerminator(redirect, signin_path=config.signin_path)
    manager = TokenLifecycleManager.from_config(
        config,
        terminator=terminator,
        route_gate=AlwaysActiveGate(),
    )
    terminator.client = manager.http_client

    def on_change() -> None:
        line = render_status_line(manager.status, warn_threshold=config.renew_threshold_seconds)
        if manager.last_event is SessionEvent.RENEWAL_FAILED and manager.last_failure:
            line += f" [warning]renewal failed: {manager.last_failure.message}[/warning]"
        elif manager.last_event is SessionEvent.RENEWED:
            line += " [success]renewed[/success]"
        console.print(line)

    manager.subscribe(on_change)
    manager.start()
    try:
        await asyncio.wait_for(ended.wait(), timeout=duration)
    except TimeoutError:
        pass
    finally:
        await manager.close()
    return ended.is_set()


def run_watch(config: ManagerConfig, *, duration: float | None) -> None:
    try:
        terminated = asyncio.run(watch(config, duration=duration))
    except KeyboardInterrupt:
        click.echo("\nStopped.", err=True)
        return
    if terminated:
        sys.exit(EXIT_TERMINATED)
