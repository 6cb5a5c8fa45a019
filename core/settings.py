"""Runtime configuration resolved from environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.env import env_first, env_float, env_int, env_str, env_url

DEFAULT_API_BASE = "https://tradescard-api.vercel.app"
DEFAULT_SITE_URL = "https://tradescard-web.vercel.app"
DEFAULT_WEB_BASE = "http://localhost:3000"
DEFAULT_SENT_LINKS_PATH = Path("uploads") / "activation" / "sent_links.json"


@dataclass(frozen=True, slots=True)
class ActivationSettings:
    """Knobs for the post-checkout activation flow."""

    api_base: str = DEFAULT_API_BASE
    site_url: str = DEFAULT_SITE_URL
    max_attempts: int = 20
    retry_delay_seconds: float = 3.0
    resend_cooldown_seconds: int = 30
    redirect_path: str = "/welcome"
    sent_links_path: Path = DEFAULT_SENT_LINKS_PATH
    http_timeout_seconds: float = 10.0

    @property
    def magic_link_redirect_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/{self.redirect_path.lstrip('/')}"

    @classmethod
    def from_env(cls) -> "ActivationSettings":
        sent_links = env_str("ACTIVATION_SENT_LINKS_FILE")
        return cls(
            api_base=env_url("API_BASE", "NEXT_PUBLIC_API_URL", "NEXT_PUBLIC_API_BASE", default=DEFAULT_API_BASE),
            site_url=env_url("SITE_URL", "NEXT_PUBLIC_SITE_URL", "NEXT_PUBLIC_APP_URL", default=DEFAULT_SITE_URL),
            max_attempts=env_int("ACTIVATION_MAX_ATTEMPTS", 20, minimum=1),
            retry_delay_seconds=env_float("ACTIVATION_RETRY_DELAY_SECONDS", 3.0, minimum=0.0),
            resend_cooldown_seconds=env_int("ACTIVATION_RESEND_COOLDOWN_SECONDS", 30, minimum=0),
            redirect_path=env_str("ACTIVATION_REDIRECT_PATH", "/welcome") or "/welcome",
            sent_links_path=Path(sent_links) if sent_links else DEFAULT_SENT_LINKS_PATH,
            http_timeout_seconds=env_float("HTTP_TIMEOUT_SECONDS", 10.0, minimum=1.0),
        )


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Settings for the FastAPI surface (proxies, Supabase, Stripe)."""

    api_upstream: str
    web_base: str
    supabase_url: Optional[str]
    supabase_anon_key: Optional[str]
    supabase_service_key: Optional[str]
    stripe_secret_key: Optional[str]
    http_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            api_upstream=env_url("API_UPSTREAM", "API_BASE", "NEXT_PUBLIC_API_URL", default=DEFAULT_API_BASE),
            web_base=env_url("WEB_BASE", default=DEFAULT_WEB_BASE),
            supabase_url=env_first("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
            supabase_anon_key=env_first("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
            supabase_service_key=env_first("SUPABASE_SERVICE_ROLE", "SUPABASE_SERVICE_ROLE_KEY"),
            stripe_secret_key=env_str("STRIPE_SECRET_KEY"),
            http_timeout_seconds=env_float("HTTP_TIMEOUT_SECONDS", 10.0, minimum=1.0),
        )


__all__ = ["ActivationSettings", "ServerSettings"]
