"""Status probe: ask the intermediary whether the credential is still valid.

A probe never raises. Anything other than a well-formed success response is
reported as an expired credential, and the next scheduled tick probes again.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tokenkeeper.models.session import DEFAULT_RENEW_THRESHOLD_SECONDS, SessionStatus

logger = logging.getLogger(__name__)


@runtime_checkable
class StatusProbe(Protocol):
    """Anything that can report the current session status."""

    async def probe(self) -> SessionStatus:
        """Return the current status, fail-closed on any error."""
        ...


class StatusResponse(BaseModel):
    """Wire shape of the intermediary's status payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    is_expired: bool = Field(alias="isExpired")
    time_until_expiry: int = Field(alias="timeUntilExpiry")
    should_refresh: bool = Field(default=False, alias="shouldRefresh")


class HttpStatusProbe:
    """StatusProbe backed by ``GET <status_path>`` on the intermediary."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        status_path: str = "/api/auth/status",
        renew_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS,
    ) -> None:
        self.client = client
        self.status_path = status_path
        self.renew_threshold = renew_threshold

    async def probe(self) -> SessionStatus:
        try:
            response = await self.client.get(self.status_path)
        except httpx.HTTPError as exc:
            logger.warning("Status probe failed: %s", exc.__class__.__name__)
            return SessionStatus.expired()

        if not response.is_success:
            logger.warning("Status probe returned HTTP %d", response.status_code)
            return SessionStatus.expired()

        try:
            payload = StatusResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            # json.JSONDecodeError is a ValueError
            logger.warning("Status probe returned an unreadable payload")
            return SessionStatus.expired()

        # The intermediary's shouldRefresh hint is informational only.
        return SessionStatus.evaluate(
            is_expired=payload.is_expired,
            seconds_until_expiry=payload.time_until_expiry,
            renew_threshold=self.renew_threshold,
        )
