"""Session timeout policy and expiry evaluation.

Session metadata travels alongside the credentials as plain unix-second
timestamps. A session ends when the access credential expires, when the user
has been idle too long, or when the session has lived past its absolute limit,
checked in that order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from tokenkeeper.models.session import DEFAULT_RENEW_THRESHOLD_SECONDS, SessionStatus

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRY = 60 * 60
REFRESH_TOKEN_EXPIRY = 60 * 60 * 24 * 30
IDLE_TIMEOUT = 60 * 60 * 2
ABSOLUTE_TIMEOUT = 60 * 60 * 24


class ExpiryReason(StrEnum):
    TOKEN = "token"
    IDLE = "idle"
    ABSOLUTE = "absolute"


class SessionMetadata(BaseModel):
    """Timestamps describing one signed-in session."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    created_at: int = Field(alias="createdAt")
    last_activity: int = Field(alias="lastActivity")
    access_token_exp: int = Field(alias="accessTokenExp")
    refresh_token_exp: int = Field(alias="refreshTokenExp")


class SessionExpiry(BaseModel):
    model_config = ConfigDict(frozen=True)

    expired: bool
    reason: ExpiryReason | None = None


def _now() -> int:
    return int(time.time())


def create_session_metadata(
    access_token_exp: int,
    refresh_token_exp: int,
    *,
    now: int | None = None,
) -> SessionMetadata:
    current = _now() if now is None else now
    return SessionMetadata(
        created_at=current,
        last_activity=current,
        access_token_exp=access_token_exp,
        refresh_token_exp=refresh_token_exp,
    )


def touch(metadata: SessionMetadata, *, now: int | None = None) -> SessionMetadata:
    """Return a copy with ``last_activity`` moved to now."""
    current = _now() if now is None else now
    return metadata.model_copy(update={"last_activity": current})


def evaluate_session(
    metadata: SessionMetadata,
    *,
    now: int | None = None,
    idle_timeout: int = IDLE_TIMEOUT,
    absolute_timeout: int = ABSOLUTE_TIMEOUT,
) -> SessionExpiry:
    current = _now() if now is None else now
    if current >= metadata.access_token_exp:
        return SessionExpiry(expired=True, reason=ExpiryReason.TOKEN)
    if current - metadata.last_activity > idle_timeout:
        return SessionExpiry(expired=True, reason=ExpiryReason.IDLE)
    if current - metadata.created_at > absolute_timeout:
        return SessionExpiry(expired=True, reason=ExpiryReason.ABSOLUTE)
    return SessionExpiry(expired=False)


def status_from_expiry(
    expires_at: int,
    *,
    now: int | None = None,
    renew_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS,
) -> SessionStatus:
    """Turn an absolute expiry instant into a :class:`SessionStatus`."""
    current = _now() if now is None else now
    return SessionStatus.evaluate(
        is_expired=current >= expires_at,
        seconds_until_expiry=expires_at - current,
        renew_threshold=renew_threshold,
    )


class MetadataStatusProbe:
    """StatusProbe evaluated locally from session metadata.

    For hosts where the intermediary runs in-process. The loader returns the
    current metadata, or None when no session exists; any loader failure is
    reported as an expired session.
    """

    def __init__(
        self,
        loader: Callable[[], SessionMetadata | None],
        *,
        renew_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS,
        clock: Callable[[], int] = _now,
    ) -> None:
        self.loader = loader
        self.renew_threshold = renew_threshold
        self.clock = clock

    async def probe(self) -> SessionStatus:
        try:
            metadata = self.loader()
        except Exception:
            logger.warning("Session metadata could not be loaded", exc_info=True)
            return SessionStatus.expired()
        if metadata is None:
            return SessionStatus.expired()

        now = self.clock()
        verdict = evaluate_session(metadata, now=now)
        if verdict.expired:
            logger.debug("Session expired locally (%s)", verdict.reason)
            return SessionStatus.expired()
        return status_from_expiry(
            metadata.access_token_exp,
            now=now,
            renew_threshold=self.renew_threshold,
        )
