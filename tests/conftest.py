from __future__ import annotations

from typing import Callable

import pytest

from core.settings import ServerSettings
from tests.activation_fakes import Harness


@pytest.fixture()
def make_harness() -> Callable[..., Harness]:
    return Harness


@pytest.fixture()
def server_settings() -> ServerSettings:
    return ServerSettings(
        api_upstream="https://api.test",
        web_base="https://web.test",
        supabase_url="https://project.supabase.test",
        supabase_anon_key="anon-key",
        supabase_service_key="service-key",
        stripe_secret_key="sk_test_123",
        http_timeout_seconds=5.0,
    )
