"""Async runner for post-checkout activation.

One :class:`ActivationReconciler` lives for one page view. It polls the
confirmation endpoint, falls back to a sign-in email, ticks the resend
cooldown and applies every outcome through :func:`state.transition`. Once
:meth:`ActivationReconciler.close` has been called nothing is applied any more.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from core.tiers import MembershipTier
from services.activation.cancellation import CancellationToken, Sleeper
from services.activation.errors import ActivationError
from services.activation.escalation import EmailLinkEscalator
from services.activation.presentation import ActivationView, present
from services.activation.redirect import RedirectLocation
from services.activation.state import (
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    NETWORK_ERROR,
    AttemptFailed,
    AttemptStarted,
    AuthRequired,
    CheckoutConfirmed,
    CooldownTicked,
    EmailLinkReady,
    EscalationFailed,
    Event,
    Phase,
    ReconciliationState,
    ResendFinished,
    ResendStarted,
    Started,
    StillPending,
    initial_state,
    transition,
)
from services.activation.tier_override import TierOverride
from services.magic_link import MagicLinkError
from services.membership_api import ConfirmOutcome, ConfirmStatus
from services.ui_events import ACTIVATION_STATE_TOPIC, EventChannel, track

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY_SECONDS = 3.0
SEND_FAILED_MESSAGE = "We couldn't send your sign-in link. Please try again."


class ConfirmationApi(Protocol):
    async def confirm_checkout(self, session_id: str) -> ConfirmOutcome: ...


class ActivationReconciler:
    def __init__(
        self,
        *,
        api: ConfirmationApi,
        escalator: EmailLinkEscalator,
        location: RedirectLocation,
        tier_override: Optional[TierOverride] = None,
        channel: Optional[EventChannel] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS,
        tick_interval: float = 1.0,
        sleep: Optional[Sleeper] = None,
        cooldown_sleep: Optional[Sleeper] = None,
    ) -> None:
        self._api = api
        self._escalator = escalator
        self._location = location
        self._tier_override = tier_override or TierOverride()
        self._channel = channel
        self._retry_delay = retry_delay
        self._tick_interval = tick_interval
        self._sleep = sleep or asyncio.sleep
        self._cooldown_sleep = cooldown_sleep or self._sleep
        self._redirect = location.checkout_redirect()
        self._state = initial_state(
            self._redirect.session_id,
            max_attempts=max_attempts,
            cooldown_length=cooldown_seconds,
        )
        self._token = CancellationToken()
        self._cooldown_task: Optional["asyncio.Task[None]"] = None

    # ------------------------------------------------------------------ accessors

    @property
    def state(self) -> ReconciliationState:
        return self._state

    @property
    def view(self) -> ActivationView:
        return present(self._state)

    @property
    def tier_override(self) -> TierOverride:
        return self._tier_override

    @property
    def closed(self) -> bool:
        return self._token.cancelled

    # ------------------------------------------------------------------ lifecycle

    async def __aenter__(self) -> "ActivationReconciler":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Tear down: pending retries, ticks and in-flight results are dropped."""
        if self._token.cancelled:
            return
        self._token.cancel()
        self._cooldown_task = None
        logger.debug("Activation reconciler for %s closed in phase %s", self._state.session_id, self._state.phase.value)

    def _apply(self, event: Event) -> bool:
        if self._token.cancelled:
            return False
        previous = self._state
        self._state = transition(previous, event)
        if self._state != previous and self._channel is not None:
            self._channel.publish(ACTIVATION_STATE_TOPIC, self._state)
        return True

    # ------------------------------------------------------------------ polling

    async def run(self, *, already_paid: bool = False) -> ReconciliationState:
        """Drive the flow to a terminal phase (or until closed).

        Calling it again after the first run returns the current state without
        issuing any request.
        """

        if self._token.cancelled or self._state.phase is not Phase.IDLE:
            return self._state

        paid = already_paid or self._tier_override.is_paid
        self._apply(Started(already_paid=paid, pending=self._redirect.pending))
        if self._state.phase is Phase.CONFIRMED:
            self._location.clear_redirect_params()
            track(self._channel, "activation_finalised", {"already_paid": True})
            return self._state
        if self._state.phase is Phase.IDLE:
            return self._state

        while self._state.can_poll:
            self._apply(AttemptStarted())
            outcome = await self._confirm_once()
            if self._token.cancelled:
                break
            if not self._apply(self._outcome_event(outcome)):
                break

            if self._state.phase is Phase.CONFIRMED:
                self._on_confirmed(outcome)
                break
            if self._state.escalating:
                await self._escalate()
                break
            if self._state.phase is Phase.ERROR:
                logger.warning(
                    "Checkout %s not confirmed after %d attempts: %s",
                    self._state.session_id,
                    self._state.attempts,
                    self._state.error,
                )
                track(self._channel, "success_poll_timeout", {"attempts": self._state.attempts})
                break

            track(self._channel, "success_poll_error", {"attempt": self._state.attempts})
            if not await self._token.sleep(self._retry_delay, sleeper=self._sleep):
                break

        return self._state

    async def _confirm_once(self) -> Optional[ConfirmOutcome]:
        session_id = self._state.session_id or ""
        try:
            return await self._api.confirm_checkout(session_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Confirm checkout attempt %d for %s failed: %s", self._state.attempts, session_id, exc)
            return None

    @staticmethod
    def _outcome_event(outcome: Optional[ConfirmOutcome]) -> Event:
        if outcome is None:
            return AttemptFailed(NETWORK_ERROR)
        if outcome.status is ConfirmStatus.CONFIRMED:
            return CheckoutConfirmed()
        if outcome.status is ConfirmStatus.AUTH_REQUIRED:
            return AuthRequired()
        if outcome.status is ConfirmStatus.PENDING:
            return StillPending()
        return AttemptFailed(outcome.message)

    def _on_confirmed(self, outcome: Optional[ConfirmOutcome]) -> None:
        # A bare {ok: true} still proves payment; the lowest paid tier stands in until the store catches up.
        tier = outcome.tier if outcome is not None and outcome.tier else MembershipTier.MEMBER
        self._tier_override.record_paid(tier)
        self._location.clear_redirect_params()
        logger.info("Checkout %s confirmed after %d attempt(s)", self._state.session_id, self._state.attempts)
        track(self._channel, "success_poll_ready", {"attempts": self._state.attempts})

    # ------------------------------------------------------------------ escalation

    async def _escalate(self) -> None:
        session_id = self._state.session_id or ""
        event: Event
        try:
            result = await self._escalator.escalate(session_id)
        except asyncio.CancelledError:
            raise
        except ActivationError as exc:
            event = EscalationFailed(exc.message)
        except MagicLinkError as exc:
            logger.warning("Automatic activation link for %s failed: %s", session_id, exc)
            event = EscalationFailed(SEND_FAILED_MESSAGE)
        except Exception as exc:
            logger.warning("Activation escalation for %s failed: %s", session_id, exc, exc_info=True)
            event = EscalationFailed(SEND_FAILED_MESSAGE)
        else:
            event = EmailLinkReady(result.email)
            track(self._channel, "activation_link_sent", {"automatic": result.sent})

        if self._apply(event) and self._state.phase is Phase.AWAITING_EMAIL_CONFIRMATION:
            self._start_cooldown()

    # ------------------------------------------------------------------ resend + cooldown

    async def resend(self) -> bool:
        """Send another link on explicit request; no-op while cooling down."""

        if self._token.cancelled or not self._state.can_resend:
            return False
        email = self._state.pending_email or ""
        self._apply(ResendStarted())
        self._start_cooldown()
        track(self._channel, "activation_link_resend")
        ok = True
        try:
            await self._escalator.resend(email)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Manual activation link resend to %s failed: %s", email, exc)
            ok = False
        self._apply(ResendFinished(ok=ok))
        return ok

    def _start_cooldown(self) -> None:
        if self._token.cancelled or self._state.cooldown_seconds <= 0:
            return
        if self._cooldown_task is not None and not self._cooldown_task.done():
            return
        task = asyncio.ensure_future(self._run_cooldown())
        self._token.track(task)
        self._cooldown_task = task

    async def _run_cooldown(self) -> None:
        while self._state.cooldown_seconds > 0:
            if not await self._token.sleep(self._tick_interval, sleeper=self._cooldown_sleep):
                return
            self._apply(CooldownTicked())


__all__ = ["ActivationReconciler", "ConfirmationApi", "DEFAULT_RETRY_DELAY_SECONDS", "SEND_FAILED_MESSAGE"]
