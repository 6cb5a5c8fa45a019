import json
from dataclasses import replace
from typing import Any, Dict, Iterator, List

import httpx
import pytest
import stripe
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.settings import ServerSettings
from services import billing_portal
from services.billing_portal import BillingPortalError, create_portal_session
from web.deps import get_server_settings, get_upstream_transport
from web.routers import billing_portal as billing_portal_router


@pytest.fixture()
def upstream_requests() -> List[httpx.Request]:
    return []


@pytest.fixture()
def billing_client(server_settings: ServerSettings, upstream_requests: List[httpx.Request]) -> Iterator[TestClient]:
    def _upstream(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        return httpx.Response(200, json={"plan": "member", "next_invoice": "2026-11-19"})

    app = FastAPI()
    app.include_router(billing_portal_router.router, prefix="/api")
    app.dependency_overrides[get_server_settings] = lambda: server_settings
    app.dependency_overrides[get_upstream_transport] = lambda: httpx.MockTransport(_upstream)
    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()


def test_creates_portal_session(billing_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []

    def _fake_create(customer_id, return_url=None, *, settings=None):
        calls.append({"customer_id": customer_id, "return_url": return_url})
        return "https://billing.stripe.test/session/1"

    monkeypatch.setattr(billing_portal_router, "create_portal_session", _fake_create)

    response = billing_client.post(
        "/api/billing-portal",
        json={"stripe_customer_id": "cus_123", "return_url": "https://web.test/account"},
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://billing.stripe.test/session/1"}
    assert calls == [{"customer_id": "cus_123", "return_url": "https://web.test/account"}]


@pytest.mark.parametrize("body", [{}, {"stripe_customer_id": ""}, {"stripe_customer_id": "   "}])
def test_missing_customer_id(billing_client: TestClient, body: Dict[str, Any]) -> None:
    response = billing_client.post("/api/billing-portal", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "missing_customer_id"}


def test_invalid_json(billing_client: TestClient) -> None:
    response = billing_client.post("/api/billing-portal", content="nope", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "invalid_json"}


def test_provider_error_is_reported(billing_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def _failing(*_args, **_kwargs):
        raise BillingPortalError("No such customer: 'cus_404'")

    monkeypatch.setattr(billing_portal_router, "create_portal_session", _failing)

    response = billing_client.post("/api/billing-portal", json={"stripe_customer_id": "cus_404"})

    assert response.status_code == 500
    assert response.json() == {"error": "No such customer: 'cus_404'"}


def test_proxy_forwards_path_query_and_user(billing_client: TestClient, upstream_requests: List[httpx.Request]) -> None:
    response = billing_client.get("/api/billing-portal/proxy/billing/summary?expand=invoices", headers={"x-user-id": "user-1"})

    assert response.status_code == 200
    assert response.json() == {"plan": "member", "next_invoice": "2026-11-19"}
    forwarded = upstream_requests[0]
    assert forwarded.method == "GET"
    assert str(forwarded.url) == "https://api.test/api/billing/summary?expand=invoices"
    assert forwarded.headers["x-user-id"] == "user-1"


def test_proxy_forwards_post_body(billing_client: TestClient, upstream_requests: List[httpx.Request]) -> None:
    response = billing_client.post("/api/billing-portal/proxy/billing/cancel", json={"reason": "too_expensive"})

    assert response.status_code == 200
    forwarded = upstream_requests[0]
    assert forwarded.method == "POST"
    assert json.loads(forwarded.content) == {"reason": "too_expensive"}


def test_service_uses_default_return_url(server_settings: ServerSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    captured: Dict[str, Any] = {}

    def _fake_session_create(**kwargs):
        captured.update(kwargs)
        return {"id": "bps_1", "url": "https://billing.stripe.test/session/2"}

    monkeypatch.setattr(stripe.billing_portal.Session, "create", _fake_session_create)

    url = create_portal_session("cus_123", settings=server_settings)

    assert url == "https://billing.stripe.test/session/2"
    assert captured == {"customer": "cus_123", "return_url": "https://web.test/app"}
    assert stripe.api_key == "sk_test_123"


def test_service_maps_stripe_errors(server_settings: ServerSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_session_create(**_kwargs):
        raise stripe.InvalidRequestError("No such customer: 'cus_404'", "customer")

    monkeypatch.setattr(stripe.billing_portal.Session, "create", _fake_session_create)

    with pytest.raises(BillingPortalError) as excinfo:
        create_portal_session("cus_404", settings=server_settings)
    assert "No such customer" in str(excinfo.value)


def test_service_requires_secret_key(server_settings: ServerSettings) -> None:
    with pytest.raises(BillingPortalError):
        create_portal_session("cus_123", settings=replace(server_settings, stripe_secret_key=None))
    assert billing_portal.default_return_url(server_settings) == "https://web.test/app"
