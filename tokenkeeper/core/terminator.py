"""Session termination: sign the user out once renewal is impossible."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionTerminator(Protocol):
    """Ends the session and sends the user back to sign-in."""

    async def terminate(self, reason: str) -> None: ...


class RedirectTerminator:
    """Drop the local credential context and redirect to the sign-in page."""

    def __init__(
        self,
        redirect: Callable[[str], None],
        *,
        signin_path: str = "/signin",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.redirect = redirect
        self.signin_path = signin_path
        self.client = client

    async def terminate(self, reason: str) -> None:
        logger.warning("Terminating session: %s", reason)
        if self.client is not None:
            self.client.cookies.clear()
        self.redirect(self.signin_path)
