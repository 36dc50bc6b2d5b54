"""Single-flight coordination of credential renewals."""

from __future__ import annotations

import asyncio
import logging

from tokenkeeper.core.renewal import RenewalClient
from tokenkeeper.models.session import FailureReason, RefreshFailure, RefreshOutcome

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """Keep at most one renewal outstanding per process.

    The first caller starts a renewal task and parks it in the in-flight slot.
    Every caller that arrives before the task settles awaits that same task and
    receives the same outcome object. The slot is emptied as soon as the
    renewal settles, so the next caller starts a fresh exchange.

    Callers await the task through ``asyncio.shield``: cancelling one caller
    (for example a timer cancelled by ``stop()``) leaves the renewal running
    for the others.
    """

    def __init__(self, client: RenewalClient) -> None:
        self.client = client
        self._in_flight: asyncio.Task[RefreshOutcome] | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    async def refresh_once(self) -> RefreshOutcome:
        """Start a renewal, or join the one already in flight."""
        return await asyncio.shield(self.renewal_task())

    def renewal_task(self) -> asyncio.Task[RefreshOutcome]:
        """Return the in-flight renewal task, starting one if the slot is empty.

        Await it through ``asyncio.shield``. Task identity tells callers which
        renewal an outcome belongs to.
        """
        task = self._in_flight
        # No await between the check and the assignment, so two coroutines on
        # the same loop can never both create a task.
        if task is None:
            task = asyncio.get_running_loop().create_task(
                self._run(), name="tokenkeeper-renewal"
            )
            self._in_flight = task
        else:
            logger.debug("Joining in-flight token renewal")
        return task

    async def _run(self) -> RefreshOutcome:
        try:
            return await self.client.renew()
        except Exception as exc:
            logger.exception("Renewal client raised unexpectedly")
            return RefreshFailure(
                reason=FailureReason.TRANSIENT,
                message=f"renewal error: {exc.__class__.__name__}",
            )
        finally:
            self._in_flight = None

    async def aclose(self) -> None:
        """Cancel a renewal still in flight. Used on process teardown only."""
        task = self._in_flight
        self._in_flight = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
