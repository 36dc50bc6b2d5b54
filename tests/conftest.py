"""Shared test fixtures for the tokenkeeper test suite."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from tokenkeeper.core.transport import build_http_client
from tokenkeeper.models.config import ManagerConfig

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def config() -> ManagerConfig:
    return ManagerConfig(base_url="https://dashboard.example.com")


@pytest.fixture
def client_factory(config: ManagerConfig) -> Callable[[Handler], httpx.AsyncClient]:
    """Build an intermediary client whose requests are answered by ``handler``."""

    def factory(handler: Handler) -> httpx.AsyncClient:
        return build_http_client(config, transport=httpx.MockTransport(handler))

    return factory
