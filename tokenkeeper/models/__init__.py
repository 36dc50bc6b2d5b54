"""Data models for tokenkeeper."""

from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import (
    CredentialPair,
    FailureReason,
    ManagerLifecycleState,
    RefreshFailure,
    RefreshOutcome,
    RefreshSuccess,
    SessionEvent,
    SessionStatus,
)

__all__ = [
    "CredentialPair",
    "FailureReason",
    "ManagerConfig",
    "ManagerLifecycleState",
    "RefreshFailure",
    "RefreshOutcome",
    "RefreshSuccess",
    "SessionEvent",
    "SessionStatus",
]
