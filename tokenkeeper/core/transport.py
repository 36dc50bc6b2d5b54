"""Shared HTTP client for talking to the trusted intermediary."""

from __future__ import annotations

import httpx

from tokenkeeper import __version__
from tokenkeeper.models.config import ManagerConfig

USER_AGENT = f"tokenkeeper/{__version__}"


def build_http_client(
    config: ManagerConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client that carries the ambient credential context.

    The cookie jar is the credential context; this process never reads or
    writes the credential values after handing them to the client.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    headers.update(config.headers)
    return httpx.AsyncClient(
        base_url=config.base_url,
        timeout=config.request_timeout_seconds,
        cookies=dict(config.cookies),
        headers=headers,
        follow_redirects=False,
        transport=transport,
    )
