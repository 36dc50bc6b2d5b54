"""Human-readable rendering of session status."""

from __future__ import annotations

from typing import Any

from tokenkeeper.models.session import (
    DEFAULT_RENEW_THRESHOLD_SECONDS,
    RefreshFailure,
    RefreshOutcome,
    SessionStatus,
)


def format_countdown(seconds: int) -> str:
    """Format seconds as ``m:ss``; non-positive values render as ``0:00``."""
    if seconds <= 0:
        return "0:00"
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes}:{remainder:02d}"


def status_label(
    status: SessionStatus,
    *,
    warn_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS,
) -> tuple[str, str]:
    """Return (label, style) for a status."""
    if status.is_expired:
        return "Expired", "status.expired"
    if status.seconds_until_expiry <= warn_threshold:
        return "Expiring Soon", "status.expiring"
    return "Valid", "status.valid"


def render_status_line(status: SessionStatus, *, warn_threshold: int = DEFAULT_RENEW_THRESHOLD_SECONDS) -> str:
    label, style = status_label(status, warn_threshold=warn_threshold)
    if status.is_expired:
        detail = "token has expired"
    else:
        detail = f"expires in {format_countdown(status.seconds_until_expiry)}"
    return f"[{style}]{label}[/{style}] [muted]{detail}[/muted]"


def status_payload(status: SessionStatus) -> dict[str, Any]:
    """Status in the intermediary's wire shape, for ``--json`` output."""
    return {
        "isExpired": status.is_expired,
        "timeUntilExpiry": status.seconds_until_expiry,
        "shouldRefresh": status.should_renew_soon,
    }


def outcome_payload(outcome: RefreshOutcome) -> dict[str, Any]:
    """Outcome summary without credential values."""
    if isinstance(outcome, RefreshFailure):
        return {
            "success": False,
            "reason": str(outcome.reason),
            "message": outcome.message,
            "status_code": outcome.status_code,
        }
    return {"success": True}
