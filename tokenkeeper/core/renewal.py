"""Renewal client: exchange the current credential pair for a new one."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from tokenkeeper.models.session import (
    CredentialPair,
    FailureReason,
    RefreshFailure,
    RefreshOutcome,
    RefreshSuccess,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class RenewalClient(Protocol):
    """Performs exactly one renewal exchange per call."""

    async def renew(self) -> RefreshOutcome:
        """Return a success or a classified failure. Never raises."""
        ...


class RenewResponse(BaseModel):
    """Wire shape of a successful renewal."""

    model_config = ConfigDict(extra="ignore")

    access_credential: str = Field(
        validation_alias=AliasChoices("accessToken", "newAccessCredential"),
        min_length=1,
    )
    refresh_credential: str = Field(
        validation_alias=AliasChoices("refreshToken", "newRefreshCredential"),
        min_length=1,
    )


class HttpRenewalClient:
    """RenewalClient backed by ``POST <refresh_path>`` on the intermediary.

    Only the statuses in ``unauthorized_statuses`` mean the renewal credential
    itself was rejected. Everything else is transient and may be retried on
    the next cycle.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        refresh_path: str = "/api/auth/refresh",
        unauthorized_statuses: Iterable[int] = (401,),
    ) -> None:
        self.client = client
        self.refresh_path = refresh_path
        self.unauthorized_statuses = frozenset(unauthorized_statuses)

    async def renew(self) -> RefreshOutcome:
        try:
            response = await self.client.post(self.refresh_path, json={})
        except httpx.HTTPError as exc:
            logger.warning("Token renewal request failed: %s", exc.__class__.__name__)
            return RefreshFailure(
                reason=FailureReason.TRANSIENT,
                message=f"network error: {exc.__class__.__name__}",
            )

        if response.status_code in self.unauthorized_statuses:
            logger.warning("Renewal credential rejected (HTTP %d)", response.status_code)
            return RefreshFailure(
                reason=FailureReason.UNAUTHORIZED,
                message="renewal credential rejected",
                status_code=response.status_code,
            )

        if not response.is_success:
            logger.warning("Token renewal returned HTTP %d", response.status_code)
            return RefreshFailure(
                reason=FailureReason.TRANSIENT,
                message=f"renewal failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = RenewResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("Token renewal returned an unreadable payload")
            return RefreshFailure(
                reason=FailureReason.TRANSIENT,
                message="malformed renewal response",
                status_code=response.status_code,
            )

        logger.info("Token renewed")
        return RefreshSuccess(
            credentials=CredentialPair(
                access_credential=payload.access_credential,
                refresh_credential=payload.refresh_credential,
            )
        )
