from __future__ import annotations

import asyncio
from dataclasses import replace

import httpx
import pytest

from services.membership_store import MembershipStoreError, SupabaseMembershipStore, get_membership_store


def _store(handler) -> SupabaseMembershipStore:
    return SupabaseMembershipStore(
        url="https://project.supabase.test",
        service_key="service-key",
        transport=httpx.MockTransport(handler),
    )


def test_get_membership_queries_by_user():
    seen = []
    row = {"user_id": "user-1", "status": "active", "plan": "member"}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[row])

    assert asyncio.run(_store(handler).get_membership("user-1")) == row
    request = seen[0]
    assert request.url.path == "/rest/v1/memberships"
    assert request.url.params["user_id"] == "eq.user-1"
    assert request.url.params["limit"] == "1"
    assert request.headers["authorization"] == "Bearer service-key"


def test_missing_row_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    assert asyncio.run(_store(handler).get_membership("user-1")) is None


def test_error_status_raises_with_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid API key"})

    with pytest.raises(MembershipStoreError) as excinfo:
        asyncio.run(_store(handler).get_membership("user-1"))
    assert str(excinfo.value) == "Invalid API key"
    assert excinfo.value.status_code == 401


def test_factory_requires_service_key(server_settings):
    with pytest.raises(RuntimeError):
        get_membership_store(replace(server_settings, supabase_service_key=None))
    assert get_membership_store(server_settings).service_key == "service-key"
