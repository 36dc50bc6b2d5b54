"""Token lifecycle manager.

Keeps a short-lived access credential alive for an open-ended session. Two
independent timers drive it: a status check (default every 30s) and a
proactive renewal (default every 20min). Renewals are deduplicated through a
:class:`RefreshCoordinator`; observers are told about every status change;
a :class:`SessionTerminator` is invoked once per expiry episode.

State is only touched from the event loop. Every start/stop bumps an epoch,
and work that settles under an older epoch is dropped without notifying
anyone.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from tokenkeeper.core.coordinator import RefreshCoordinator
from tokenkeeper.core.observers import Observer, ObserverHandle, ObserverRegistry
from tokenkeeper.core.probe import HttpStatusProbe, StatusProbe
from tokenkeeper.core.renewal import HttpRenewalClient
from tokenkeeper.core.routes import AlwaysActiveGate, PathRouteGate, RouteGate
from tokenkeeper.core.terminator import SessionTerminator
from tokenkeeper.core.transport import build_http_client
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import (
    FailureReason,
    ManagerLifecycleState,
    RefreshFailure,
    RefreshOutcome,
    RefreshSuccess,
    SessionEvent,
    SessionStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_STATUS_INTERVAL = 30.0
DEFAULT_RENEWAL_INTERVAL = 20 * 60.0


class TokenLifecycleManager:
    """Process-wide coordinator for credential status and renewal."""

    def __init__(
        self,
        probe: StatusProbe,
        coordinator: RefreshCoordinator,
        *,
        terminator: SessionTerminator | None = None,
        route_gate: RouteGate | None = None,
        status_interval: float = DEFAULT_STATUS_INTERVAL,
        renewal_interval: float = DEFAULT_RENEWAL_INTERVAL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if status_interval <= 0 or renewal_interval <= 0:
            raise ValueError("timer intervals must be positive")
        self.probe = probe
        self.coordinator = coordinator
        self.terminator = terminator
        self.route_gate: RouteGate = route_gate or AlwaysActiveGate()
        self.status_interval = status_interval
        self.renewal_interval = renewal_interval
        self.observers = ObserverRegistry()
        self.last_event: SessionEvent | None = None
        self.last_failure: RefreshFailure | None = None

        self._http_client = http_client
        self._state = ManagerLifecycleState.STOPPED
        self._status = SessionStatus.expired()
        self._tasks: list[asyncio.Task[None]] = []
        self._epoch = 0
        self._probe_seq = 0
        self._applied_seq = 0
        self._expired_notified = False
        self._renewals_halted = False
        self._handled_renewal: asyncio.Task[RefreshOutcome] | None = None

    @classmethod
    def from_config(
        cls,
        config: ManagerConfig,
        *,
        terminator: SessionTerminator | None = None,
        route_gate: RouteGate | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> TokenLifecycleManager:
        """Wire the HTTP leaves for a config. The manager owns the client."""
        client = build_http_client(config, transport=transport)
        probe = HttpStatusProbe(
            client,
            status_path=config.status_path,
            renew_threshold=config.renew_threshold_seconds,
        )
        renewal = HttpRenewalClient(
            client,
            refresh_path=config.refresh_path,
            unauthorized_statuses=config.unauthorized_statuses,
        )
        return cls(
            probe,
            RefreshCoordinator(renewal),
            terminator=terminator,
            route_gate=route_gate or PathRouteGate(config.public_routes),
            status_interval=config.status_interval_seconds,
            renewal_interval=config.renewal_interval_seconds,
            http_client=client,
        )

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> ManagerLifecycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ManagerLifecycleState.RUNNING

    @property
    def status(self) -> SessionStatus:
        """Last known status; fail-closed until the first probe lands."""
        return self._status

    @property
    def http_client(self) -> httpx.AsyncClient | None:
        return self._http_client

    def is_expired(self) -> bool:
        return self._status.is_expired

    def time_until_expiry(self) -> int:
        return self._status.seconds_until_expiry

    def subscribe(self, callback: Observer) -> ObserverHandle:
        return self.observers.subscribe(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm both timers and probe immediately. No-op when running.

        Must be called with an event loop running.
        """
        if self._state is ManagerLifecycleState.RUNNING:
            return
        loop = asyncio.get_running_loop()
        self._state = ManagerLifecycleState.RUNNING
        self._epoch += 1
        self._renewals_halted = False
        epoch = self._epoch
        self._tasks = [
            loop.create_task(self._status_loop(epoch), name="tokenkeeper-status"),
            loop.create_task(self._renewal_loop(epoch), name="tokenkeeper-renewal-timer"),
        ]
        logger.info(
            "Token manager started (status every %ss, renewal every %ss)",
            self.status_interval,
            self.renewal_interval,
        )

    def stop(self) -> None:
        """Cancel both timers. No-op when stopped.

        A renewal already issued keeps running but its result is ignored here.
        """
        if self._state is ManagerLifecycleState.STOPPED:
            return
        self._state = ManagerLifecycleState.STOPPED
        self._epoch += 1
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self._expired_notified = False
        logger.info("Token manager stopped")

    def restart(self) -> None:
        self.stop()
        self.start()

    def sync_route(self) -> ManagerLifecycleState:
        """Start or stop according to the route gate."""
        if self.route_gate.is_active():
            self.start()
        else:
            self.stop()
        return self._state

    async def close(self) -> None:
        """Tear down: stop timers, drop observers, release the HTTP client."""
        tasks = list(self._tasks)
        self.stop()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.coordinator.aclose()
        self.observers.clear()
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def check_status(self) -> SessionStatus:
        """Run one status-check tick now and return the cached status."""
        await self._status_tick(self._epoch)
        return self._status

    async def run_renewal_cycle(self) -> RefreshOutcome | None:
        """Run one proactive-renewal tick now.

        Returns None when the tick was skipped (stopped, public route, or
        renewals halted after the renewal credential was rejected).
        """
        return await self._renewal_tick(self._epoch)

    async def force_refresh(self) -> RefreshOutcome:
        """Renew now, sharing any renewal already in flight.

        Rejected with ``not_running`` while the manager is stopped.
        """
        if self._state is not ManagerLifecycleState.RUNNING:
            return RefreshFailure(
                reason=FailureReason.NOT_RUNNING,
                message="token manager is not running",
            )
        return await self._renew(self._epoch)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    async def _status_loop(self, epoch: int) -> None:
        while True:
            try:
                await self._status_tick(epoch)
            except Exception:
                logger.exception("Status check tick failed")
            await asyncio.sleep(self.status_interval)

    async def _renewal_loop(self, epoch: int) -> None:
        while True:
            await asyncio.sleep(self.renewal_interval)
            try:
                await self._renewal_tick(epoch)
            except Exception:
                logger.exception("Proactive renewal tick failed")

    def _current(self, epoch: int) -> bool:
        return self._state is ManagerLifecycleState.RUNNING and epoch == self._epoch

    async def _status_tick(self, epoch: int) -> None:
        if not self._current(epoch) or not self.route_gate.is_active():
            return
        status = await self._apply_probe(epoch, SessionEvent.STATUS_CHANGED)
        if status is not None and status.should_renew_soon and self._current(epoch):
            logger.info("Access credential expires in %ss, renewing", status.seconds_until_expiry)
            await self._renew(epoch)

    async def _renewal_tick(self, epoch: int) -> RefreshOutcome | None:
        if not self._current(epoch) or not self.route_gate.is_active():
            return None
        if self._renewals_halted:
            logger.debug("Skipping proactive renewal; renewal credential was rejected")
            return None
        return await self._renew(epoch)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _apply_probe(self, epoch: int, event: SessionEvent) -> SessionStatus | None:
        self._probe_seq += 1
        seq = self._probe_seq
        try:
            status = await self.probe.probe()
        except Exception:
            logger.exception("Status probe raised; treating session as expired")
            status = SessionStatus.expired()

        if not self._current(epoch):
            return None
        if seq < self._applied_seq:
            logger.debug("Dropping probe #%d; #%d already applied", seq, self._applied_seq)
            if event is SessionEvent.RENEWED:
                self._publish(event)
            return None
        self._applied_seq = seq
        self._status = status

        if status.is_expired:
            if self._expired_notified:
                self._publish(event)
                return status
            self._expired_notified = True
            self._publish(SessionEvent.EXPIRED)
            await self._terminate("access credential expired")
            return status

        self._expired_notified = False
        self._publish(event)
        return status

    async def _renew(self, epoch: int) -> RefreshOutcome:
        if self._renewals_halted:
            return RefreshFailure(
                reason=FailureReason.UNAUTHORIZED,
                message="renewals halted until the manager is restarted",
            )
        task = self.coordinator.renewal_task()
        outcome = await asyncio.shield(task)
        if not self._current(epoch):
            logger.debug("Ignoring renewal that settled after the manager stopped")
            return outcome
        if task is self._handled_renewal:
            return outcome
        # First current awaiter of this renewal acts on it; the rest share the outcome.
        self._handled_renewal = task

        if isinstance(outcome, RefreshSuccess):
            self.last_failure = None
            await self._apply_probe(epoch, SessionEvent.RENEWED)
        elif outcome.reason == FailureReason.UNAUTHORIZED:
            self.last_failure = outcome
            self._renewals_halted = True
            if not self._expired_notified:
                self._expired_notified = True
                self._publish(SessionEvent.EXPIRED)
                await self._terminate("renewal credential rejected")
        else:
            self.last_failure = outcome
            self._publish(SessionEvent.RENEWAL_FAILED)
        return outcome

    def _publish(self, event: SessionEvent) -> None:
        self.last_event = event
        self.observers.notify_all()

    async def _terminate(self, reason: str) -> None:
        if self.terminator is None:
            logger.warning("Session terminated (%s); no terminator configured", reason)
            return
        try:
            await self.terminator.terminate(reason)
        except Exception:
            logger.exception("Session terminator failed")
