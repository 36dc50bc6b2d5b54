"""Refresh command implementation."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from tokenkeeper.core.coordinator import RefreshCoordinator
from tokenkeeper.core.renewal import HttpRenewalClient
from tokenkeeper.core.transport import build_http_client
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import FailureReason, RefreshFailure, RefreshOutcome
from tokenkeeper.ui.console import console
from tokenkeeper.ui.status import outcome_payload

EXIT_TRANSIENT = 1
EXIT_UNAUTHORIZED = 2


async def refresh_once(config: ManagerConfig) -> RefreshOutcome:
    async with build_http_client(config) as client:
        renewal = HttpRenewalClient(
            client,
            refresh_path=config.refresh_path,
            unauthorized_statuses=config.unauthorized_statuses,
        )
        return await RefreshCoordinator(renewal).refresh_once()


def run_refresh(config: ManagerConfig, *, as_json: bool) -> None:
    """Renew once and report the outcome. Credential values are never shown."""
    outcome = asyncio.run(refresh_once(config))

    if as_json:
        click.echo(json.dumps(outcome_payload(outcome), sort_keys=True))
    elif isinstance(outcome, RefreshFailure):
        click.echo(f"Error: {outcome.message}", err=True)
    else:
        console.print("[success]Credential renewed[/success]")

    if isinstance(outcome, RefreshFailure):
        sys.exit(EXIT_UNAUTHORIZED if outcome.reason == FailureReason.UNAUTHORIZED else EXIT_TRANSIENT)
