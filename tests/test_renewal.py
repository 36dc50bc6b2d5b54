"""Tests for the HTTP renewal client."""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from tokenkeeper.core.renewal import HttpRenewalClient, RenewalClient
from tokenkeeper.models.session import FailureReason, RefreshFailure, RefreshSuccess


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"accessToken": "acc-2", "refreshToken": "ref-2"})


@pytest.mark.asyncio
class TestHttpRenewalClient:
    async def test_success_returns_new_pair(self, client_factory):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        async with client_factory(handler) as client:
            outcome = await HttpRenewalClient(client).renew()

        assert isinstance(outcome, RefreshSuccess)
        assert outcome.credentials.access_credential.get_secret_value() == "acc-2"
        assert outcome.credentials.refresh_credential.get_secret_value() == "ref-2"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/auth/refresh"
        assert json.loads(seen[0].content) == {}

    async def test_accepts_descriptive_field_names(self, client_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"newAccessCredential": "a", "newRefreshCredential": "r"},
            )

        async with client_factory(handler) as client:
            outcome = await HttpRenewalClient(client).renew()
        assert isinstance(outcome, RefreshSuccess)

    async def test_401_is_unauthorized(self, client_factory):
        async with client_factory(lambda request: httpx.Response(401)) as client:
            outcome = await HttpRenewalClient(client).renew()

        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.UNAUTHORIZED
        assert outcome.status_code == 401

    async def test_server_error_is_transient(self, client_factory):
        async with client_factory(lambda request: httpx.Response(502)) as client:
            outcome = await HttpRenewalClient(client).renew()

        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.TRANSIENT
        assert outcome.status_code == 502

    async def test_403_is_transient_by_default(self, client_factory):
        async with client_factory(lambda request: httpx.Response(403)) as client:
            outcome = await HttpRenewalClient(client).renew()
        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.TRANSIENT

    async def test_configurable_unauthorized_statuses(self, client_factory):
        async with client_factory(lambda request: httpx.Response(403)) as client:
            outcome = await HttpRenewalClient(client, unauthorized_statuses=[401, 403]).renew()
        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.UNAUTHORIZED

    async def test_network_error_is_transient(self, client_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with client_factory(handler) as client:
            outcome = await HttpRenewalClient(client).renew()

        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.TRANSIENT
        assert "ReadTimeout" in outcome.message

    async def test_malformed_body_is_transient(self, client_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True})

        async with client_factory(handler) as client:
            outcome = await HttpRenewalClient(client).renew()

        assert isinstance(outcome, RefreshFailure)
        assert outcome.reason == FailureReason.TRANSIENT

    async def test_patched_post(self):
        """The client only relies on AsyncClient.post."""
        response = httpx.Response(200, json={"accessToken": "a", "refreshToken": "r"})
        with patch("httpx.AsyncClient.post", return_value=response) as mock_post:
            async with httpx.AsyncClient(base_url="https://dashboard.example.com") as client:
                outcome = await HttpRenewalClient(client, refresh_path="/renew").renew()

        assert outcome.ok is True
        mock_post.assert_awaited_once_with("/renew", json={})


def test_http_renewal_satisfies_protocol():
    assert isinstance(HttpRenewalClient(httpx.AsyncClient()), RenewalClient)
