import json
from typing import Callable, Iterator, List

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.settings import ServerSettings
from web.deps import get_server_settings, get_upstream_transport
from web.routers.checkout import router as checkout_router

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def upstream_requests() -> List[httpx.Request]:
    return []


@pytest.fixture()
def make_checkout_client(
    server_settings: ServerSettings, upstream_requests: List[httpx.Request]
) -> Iterator[Callable[[Handler], TestClient]]:
    """Build a client whose upstream calls are answered by ``handler``."""
    clients: List[TestClient] = []

    def _factory(handler: Handler) -> TestClient:
        def _recording(request: httpx.Request) -> httpx.Response:
            upstream_requests.append(request)
            return handler(request)

        app = FastAPI()
        app.include_router(checkout_router, prefix="/api")
        app.dependency_overrides[get_server_settings] = lambda: server_settings
        app.dependency_overrides[get_upstream_transport] = lambda: httpx.MockTransport(_recording)
        client = TestClient(app)
        clients.append(client)
        return client

    yield _factory
    for client in clients:
        client.close()


def test_forwards_body_and_credentials(make_checkout_client, upstream_requests) -> None:
    client = make_checkout_client(lambda request: httpx.Response(200, json={"url": "https://checkout.stripe.test/c/1"}))

    response = client.post(
        "/api/checkout",
        json={"tier": "member", "trial": True},
        headers={"Authorization": "Bearer token-1", "Cookie": "sb-session=abc"},
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.test/c/1"}
    forwarded = upstream_requests[0]
    assert str(forwarded.url) == "https://api.test/api/checkout"
    assert forwarded.headers["authorization"] == "Bearer token-1"
    assert forwarded.headers["cookie"] == "sb-session=abc"
    assert json.loads(forwarded.content) == {"tier": "member", "trial": True}


def test_relays_upstream_error_status(make_checkout_client) -> None:
    client = make_checkout_client(lambda request: httpx.Response(409, json={"error": "already_member"}))

    response = client.post("/api/checkout", json={"tier": "pro"})

    assert response.status_code == 409
    assert response.json() == {"error": "already_member"}


def test_relays_non_json_body_verbatim(make_checkout_client) -> None:
    client = make_checkout_client(
        lambda request: httpx.Response(502, text="Bad gateway", headers={"content-type": "text/plain"})
    )

    response = client.post("/api/checkout", json={"tier": "pro"})

    assert response.status_code == 502
    assert response.text == "Bad gateway"
    assert response.headers["content-type"].startswith("text/plain")


def test_invalid_json_is_rejected(make_checkout_client, upstream_requests) -> None:
    client = make_checkout_client(lambda request: httpx.Response(200, json={}))

    response = client.post("/api/checkout", content="{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "invalid_json"}
    assert upstream_requests == []


def test_upstream_unreachable(make_checkout_client) -> None:
    def _offline(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client = make_checkout_client(_offline)

    response = client.post("/api/checkout", json={"tier": "pro"})

    assert response.status_code == 500
    assert response.json() == {"error": "checkout_proxy_failed"}
