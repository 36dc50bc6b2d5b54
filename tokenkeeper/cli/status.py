"""Status and inspect command implementations."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from tokenkeeper.core.probe import HttpStatusProbe
from tokenkeeper.core.session_policy import SessionMetadata, evaluate_session, status_from_expiry
from tokenkeeper.core.transport import build_http_client
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import SessionStatus
from tokenkeeper.ui.console import console
from tokenkeeper.ui.status import render_status_line, status_payload


async def probe_once(config: ManagerConfig) -> SessionStatus:
    async with build_http_client(config) as client:
        probe = HttpStatusProbe(
            client,
            status_path=config.status_path,
            renew_threshold=config.renew_threshold_seconds,
        )
        return await probe.probe()


def run_status(config: ManagerConfig, *, as_json: bool) -> None:
    """Probe once and print the result."""
    status = asyncio.run(probe_once(config))
    if as_json:
        click.echo(json.dumps(status_payload(status), sort_keys=True))
        return
    console.print(render_status_line(status, warn_threshold=config.renew_threshold_seconds))


def run_inspect(metadata_file: Path, *, as_json: bool) -> None:
    """Evaluate a session metadata JSON file."""
    try:
        metadata = SessionMetadata.model_validate_json(metadata_file.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        click.echo(f"Error: could not read session metadata: {exc}", err=True)
        sys.exit(1)

    verdict = evaluate_session(metadata)
    status = SessionStatus.expired() if verdict.expired else status_from_expiry(metadata.access_token_exp)

    if as_json:
        payload = {
            "expired": verdict.expired,
            "reason": str(verdict.reason) if verdict.reason else None,
            **status_payload(status),
        }
        click.echo(json.dumps(payload, sort_keys=True))
        return

    console.print(render_status_line(status))
    if verdict.reason is not None:
        console.print(f"[muted]reason: {verdict.reason}[/muted]")
