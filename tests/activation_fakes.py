"""Test doubles for the activation flow (API, lookup, sender, sleepers)."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from services.activation.escalation import EmailLinkEscalator
from services.activation.reconciler import ActivationReconciler
from services.activation.redirect import RedirectLocation
from services.activation.sent_links import MemorySentLinkStore, SentLinkStore
from services.activation.tier_override import TierOverride
from services.magic_link import MagicLinkError
from services.membership_api import ConfirmOutcome, ConfirmStatus
from services.ui_events import EventChannel

WELCOME_URL = "https://tradescard-web.vercel.app/welcome?pending=1&cs=cs_test_123&ref=promo"
BUYER_EMAIL = "buyer@example.com"

CONFIRMED = ConfirmOutcome(ConfirmStatus.CONFIRMED, tier="member", status_code=200)
PENDING = ConfirmOutcome(ConfirmStatus.PENDING, status_code=200)
AUTH_REQUIRED = ConfirmOutcome(ConfirmStatus.AUTH_REQUIRED, status_code=401)
FAILED = ConfirmOutcome(ConfirmStatus.FAILED, status_code=500)

Scripted = Union[ConfirmOutcome, Exception]


class FakeConfirmApi:
    """Replays scripted confirmation outcomes; the last one repeats."""

    def __init__(self, outcomes: Sequence[Scripted] = (FAILED,), *, gate: Optional[asyncio.Event] = None) -> None:
        self._outcomes = list(outcomes)
        self.gate = gate
        self.calls: List[str] = []

    async def confirm_checkout(self, session_id: str) -> ConfirmOutcome:
        self.calls.append(session_id)
        if self.gate is not None:
            await self.gate.wait()
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeLookup:
    def __init__(self, email: Optional[str] = BUYER_EMAIL, *, error: Optional[Exception] = None) -> None:
        self.email = email
        self.error = error
        self.calls: List[str] = []

    async def checkout_session_email(self, session_id: str) -> Optional[str]:
        self.calls.append(session_id)
        if self.error is not None:
            raise self.error
        return self.email


class FakeSender:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[Dict[str, str]] = []

    async def send_magic_link(self, email: str, redirect_url: str) -> None:
        if self.fail:
            raise MagicLinkError("Email rate limit exceeded", status_code=429)
        self.sent.append({"email": email, "redirect_url": redirect_url})


class RecordingSleep:
    """Returns immediately and remembers the requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ManualTicker:
    """Cooldown sleeper that only wakes when the test advances it."""

    def __init__(self) -> None:
        self._waiters: List["asyncio.Future[None]"] = []

    async def __call__(self, seconds: float) -> None:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def cancelled(self) -> int:
        return sum(1 for waiter in self._waiters if waiter.cancelled())

    async def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            await _settle()
            pending = [waiter for waiter in self._waiters if not waiter.done()]
            if not pending:
                return
            pending[0].set_result(None)
            await _settle()


async def _settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class Harness:
    def __init__(
        self,
        *,
        outcomes: Sequence[Scripted] = (FAILED,),
        url: str = WELCOME_URL,
        lookup: Optional[FakeLookup] = None,
        sender: Optional[FakeSender] = None,
        sent_links: Optional[SentLinkStore] = None,
        tier_override: Optional[TierOverride] = None,
        cooldown_sleep: Optional[Callable[[float], Any]] = None,
        cooldown_seconds: int = 30,
        max_attempts: int = 20,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.api = FakeConfirmApi(outcomes, gate=gate)
        self.lookup = lookup or FakeLookup()
        self.sender = sender or FakeSender()
        self.sent_links = sent_links if sent_links is not None else MemorySentLinkStore()
        self.sleep = RecordingSleep()
        self.channel = EventChannel()
        self.replaced_urls: List[str] = []
        self.published: List[Any] = []
        self.tracked: List[Dict[str, Any]] = []
        self.channel.subscribe("activation.state", self.published.append)
        self.channel.subscribe("track", self.tracked.append)
        self.escalator = EmailLinkEscalator(
            lookup=self.lookup,
            sender=self.sender,
            sent_links=self.sent_links,
            redirect_url="https://tradescard-web.vercel.app/welcome",
        )
        self.reconciler = ActivationReconciler(
            api=self.api,
            escalator=self.escalator,
            location=RedirectLocation(url, on_replace=self.replaced_urls.append),
            tier_override=tier_override,
            channel=self.channel,
            max_attempts=max_attempts,
            retry_delay=3.0,
            cooldown_seconds=cooldown_seconds,
            sleep=self.sleep,
            cooldown_sleep=cooldown_sleep or ManualTicker(),
        )

    @property
    def tracked_events(self) -> List[str]:
        return [entry["event"] for entry in self.tracked]


