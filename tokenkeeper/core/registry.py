"""Process-wide token manager instance.

One manager per process, created on first use behind a lock and started right
away when an event loop is running. Everything else receives the instance
explicitly.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from tokenkeeper.core.routes import RouteGate
from tokenkeeper.core.scheduler import TokenLifecycleManager
from tokenkeeper.core.terminator import SessionTerminator
from tokenkeeper.models.config import ManagerConfig
from tokenkeeper.models.session import ManagerLifecycleState

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_manager: TokenLifecycleManager | None = None


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def get_token_manager(
    config: ManagerConfig | None = None,
    *,
    terminator: SessionTerminator | None = None,
    route_gate: RouteGate | None = None,
) -> TokenLifecycleManager:
    """Return the process manager, creating it on first call.

    A stopped manager is started (subject to its route gate) whenever this is
    called with an event loop running. Arguments only apply to the call that
    creates the manager.
    """
    global _manager
    with _lock:
        if _manager is None:
            _manager = TokenLifecycleManager.from_config(
                config or ManagerConfig(),
                terminator=terminator,
                route_gate=route_gate,
            )
        manager = _manager

    if manager.state is ManagerLifecycleState.STOPPED:
        if _loop_running():
            manager.sync_route()
        else:
            logger.debug("No event loop running; token manager not started yet")
    return manager


async def cleanup_token_manager() -> None:
    """Tear down the process manager, if any. The next get creates a new one."""
    global _manager
    with _lock:
        manager, _manager = _manager, None
    if manager is not None:
        await manager.close()
