"""Test doubles for the token lifecycle leaves."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from tokenkeeper.core.coordinator import RefreshCoordinator
from tokenkeeper.core.routes import RouteGate
from tokenkeeper.core.scheduler import TokenLifecycleManager
from tokenkeeper.core.terminator import SessionTerminator
from tokenkeeper.models.session import (
    CredentialPair,
    RefreshOutcome,
    RefreshSuccess,
    SessionStatus,
)

HEALTHY = SessionStatus.evaluate(is_expired=False, seconds_until_expiry=3600)
EXPIRING = SessionStatus.evaluate(is_expired=False, seconds_until_expiry=250)
EXPIRED = SessionStatus.expired()


def success_outcome(access: str = "access-new", refresh: str = "refresh-new") -> RefreshSuccess:
    return RefreshSuccess(
        credentials=CredentialPair(access_credential=access, refresh_credential=refresh)
    )


class FakeProbe:
    """Returns queued statuses in order, then keeps returning the last one."""

    def __init__(self, *statuses: SessionStatus) -> None:
        self._queue = list(statuses) or [HEALTHY]
        self.calls = 0

    def push(self, status: SessionStatus) -> None:
        self._queue.append(status)

    async def probe(self) -> SessionStatus:
        self.calls += 1
        if len(self._queue) > 1:
            return self._queue.pop(0)
        return self._queue[0]


class FakeRenewalClient:
    """Returns queued outcomes, optionally holding each call until ``gate`` is set."""

    def __init__(self, *outcomes: RefreshOutcome, gate: asyncio.Event | None = None) -> None:
        self._outcomes = list(outcomes) or [success_outcome()]
        self.gate = gate
        self.calls = 0

    async def renew(self) -> RefreshOutcome:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if len(self._outcomes) > 1:
            return self._outcomes.pop(0)
        return self._outcomes[0]


def make_manager(
    probe: FakeProbe | None = None,
    renewal: FakeRenewalClient | None = None,
    *,
    terminator: SessionTerminator | None = None,
    route_gate: RouteGate | None = None,
    status_interval: float = 30.0,
    renewal_interval: float = 1200.0,
) -> TokenLifecycleManager:
    return TokenLifecycleManager(
        probe or FakeProbe(),
        RefreshCoordinator(renewal or FakeRenewalClient()),
        terminator=terminator,
        route_gate=route_gate,
        status_interval=status_interval,
        renewal_interval=renewal_interval,
    )


async def settle(rounds: int = 20) -> None:
    """Let every ready task on the loop run to its next real suspension."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@asynccontextmanager
async def running(manager: TokenLifecycleManager) -> AsyncIterator[TokenLifecycleManager]:
    manager.start()
    await settle()
    try:
        yield manager
    finally:
        await manager.close()
