"""Route gating: does the current navigation context need a live session?"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

DEFAULT_PUBLIC_ROUTES = ("/signin",)


@runtime_checkable
class RouteGate(Protocol):
    """Reports whether session management should be active right now."""

    def is_active(self) -> bool: ...


def is_public_route(pathname: str, public_routes: Iterable[str]) -> bool:
    """Match a path against public route prefixes on segment boundaries.

    The root route ``/`` only ever matches itself.
    """
    for route in public_routes:
        if route == "/":
            if pathname == "/":
                return True
            continue
        if pathname == route or pathname.startswith(f"{route}/"):
            return True
    return False


class AlwaysActiveGate:
    """Gate for contexts without public routes."""

    def is_active(self) -> bool:
        return True


class PathRouteGate:
    """Gate driven by the current path; public routes switch management off."""

    def __init__(
        self,
        public_routes: Iterable[str] = DEFAULT_PUBLIC_ROUTES,
        *,
        current_path: str = "/",
    ) -> None:
        self.public_routes = tuple(public_routes)
        self.current_path = current_path

    def navigate(self, path: str) -> bool:
        """Record a navigation and return whether the new route is protected."""
        self.current_path = path
        return self.is_active()

    def is_active(self) -> bool:
        return not is_public_route(self.current_path, self.public_routes)
