"""Session status and refresh outcome models."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_RENEW_THRESHOLD_SECONDS = 300


class ManagerLifecycleState(StrEnum):
    """Lifecycle of the token manager. Timers exist iff RUNNING."""

    STOPPED = "stopped"
    RUNNING = "running"


class FailureReason(StrEnum):
    """Why a renewal did not produce a new credential pair."""

    UNAUTHORIZED = "unauthorized"
    TRANSIENT = "transient"
    NOT_RUNNING = "not_running"


class SessionEvent(StrEnum):
    """Last signal delivered to observers."""

    STATUS_CHANGED = "status_changed"
    RENEWED = "renewed"
    RENEWAL_FAILED = "renewal_failed"
    EXPIRED = "expired"


class SessionStatus(BaseModel):
    """Derived credential status as last reported by the intermediary."""

    model_config = ConfigDict(frozen=True)

    is_expired: bool
    seconds_until_expiry: int = Field(ge=0)
    should_renew_soon: bool = False

    @classmethod
    def expired(cls) -> SessionStatus:
        """Fail-closed status used whenever the real status is unknown."""
        return cls(is_expired=True, seconds_until_expiry=0, should_renew_soon=False)

    @classmethod
    def evaluate(
        cls,
        *,
        is_expired: bool,
        seconds_until_expiry: int,
        renew_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS,
    ) -> SessionStatus:
        """Build a status, deriving ``should_renew_soon`` from the threshold."""
        remaining = max(int(seconds_until_expiry), 0)
        return cls(
            is_expired=is_expired,
            seconds_until_expiry=remaining,
            should_renew_soon=(not is_expired) and remaining <= renew_threshold,
        )


class CredentialPair(BaseModel):
    """Freshly issued access and renewal credentials.

    Values are kept as secrets so they never show up in reprs or logs.
    """

    model_config = ConfigDict(frozen=True)

    access_credential: SecretStr
    refresh_credential: SecretStr


class RefreshSuccess(BaseModel):
    """Renewal completed and the intermediary issued a new pair."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    credentials: CredentialPair

    @property
    def ok(self) -> bool:
        return True


class RefreshFailure(BaseModel):
    """Renewal did not complete."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: FailureReason
    message: str = ""
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_terminal(self) -> bool:
        return self.reason == FailureReason.UNAUTHORIZED


RefreshOutcome = RefreshSuccess | RefreshFailure
