"""Core token lifecycle components."""

from tokenkeeper.core.coordinator import RefreshCoordinator
from tokenkeeper.core.observers import ObserverHandle, ObserverRegistry
from tokenkeeper.core.probe import HttpStatusProbe, StatusProbe
from tokenkeeper.core.registry import cleanup_token_manager, get_token_manager
from tokenkeeper.core.renewal import HttpRenewalClient, RenewalClient
from tokenkeeper.core.routes import AlwaysActiveGate, PathRouteGate, RouteGate, is_public_route
from tokenkeeper.core.scheduler import TokenLifecycleManager
from tokenkeeper.core.terminator import RedirectTerminator, SessionTerminator

__all__ = [
    "AlwaysActiveGate",
    "HttpRenewalClient",
    "HttpStatusProbe",
    "ObserverHandle",
    "ObserverRegistry",
    "PathRouteGate",
    "RedirectTerminator",
    "RefreshCoordinator",
    "RenewalClient",
    "RouteGate",
    "SessionTerminator",
    "StatusProbe",
    "TokenLifecycleManager",
    "cleanup_token_manager",
    "get_token_manager",
    "is_public_route",
]
