"""Reconciliation state and its pure transition function.

The runner in :mod:`services.activation.reconciler` performs the I/O and feeds
the outcomes in here as events; everything observable about the flow (phase,
attempt count, pending email, cooldown) is derived by :func:`transition`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_COOLDOWN_SECONDS = 30

GENERIC_CONFIRM_ERROR = "We couldn't confirm your membership. Please refresh in a moment."
NETWORK_ERROR = "Network error confirming checkout."
FINALISING_INFO = "Finalising your membership…"
LINK_SENT_INFO = "We've emailed you a secure sign-in link. Open it to activate your account."


class Phase(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    AWAITING_EMAIL_CONFIRMATION = "awaiting_email_confirmation"
    CONFIRMED = "confirmed"
    ERROR = "error"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


TERMINAL_PHASES = frozenset({Phase.AWAITING_EMAIL_CONFIRMATION, Phase.CONFIRMED, Phase.ERROR})


@dataclass(frozen=True, slots=True)
class ReconciliationState:
    session_id: Optional[str] = None
    attempts: int = 0
    phase: Phase = Phase.IDLE
    pending_email: Optional[str] = None
    cooldown_seconds: int = 0
    already_paid: bool = False
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    cooldown_length: int = DEFAULT_COOLDOWN_SECONDS
    busy: bool = False
    escalating: bool = False
    resending: bool = False
    info: str = ""
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def attempts_remaining(self) -> int:
        return max(self.max_attempts - self.attempts, 0)

    @property
    def can_poll(self) -> bool:
        return self.phase is Phase.POLLING and not self.escalating and self.attempts < self.max_attempts

    @property
    def can_resend(self) -> bool:
        return (
            self.phase is Phase.AWAITING_EMAIL_CONFIRMATION
            and self.pending_email is not None
            and self.cooldown_seconds == 0
            and not self.resending
        )


# --------------------------------------------------------------------------- events


@dataclass(frozen=True, slots=True)
class Started:
    already_paid: bool = False
    pending: bool = True


@dataclass(frozen=True, slots=True)
class AttemptStarted:
    pass


@dataclass(frozen=True, slots=True)
class CheckoutConfirmed:
    pass


@dataclass(frozen=True, slots=True)
class AuthRequired:
    pass


@dataclass(frozen=True, slots=True)
class StillPending:
    pass


@dataclass(frozen=True, slots=True)
class AttemptFailed:
    message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class EmailLinkReady:
    email: str
    info: str = LINK_SENT_INFO


@dataclass(frozen=True, slots=True)
class EscalationFailed:
    message: str


@dataclass(frozen=True, slots=True)
class CooldownTicked:
    pass


@dataclass(frozen=True, slots=True)
class ResendStarted:
    pass


@dataclass(frozen=True, slots=True)
class ResendFinished:
    ok: bool


Event = Union[
    Started,
    AttemptStarted,
    CheckoutConfirmed,
    AuthRequired,
    StillPending,
    AttemptFailed,
    EmailLinkReady,
    EscalationFailed,
    CooldownTicked,
    ResendStarted,
    ResendFinished,
]


def initial_state(
    session_id: Optional[str],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    cooldown_length: int = DEFAULT_COOLDOWN_SECONDS,
) -> ReconciliationState:
    return ReconciliationState(session_id=session_id, max_attempts=max_attempts, cooldown_length=cooldown_length)


def _start(state: ReconciliationState, event: Started) -> ReconciliationState:
    if state.phase is not Phase.IDLE:
        return state
    if event.already_paid:
        return replace(state, already_paid=True, phase=Phase.CONFIRMED, busy=False)
    if not state.session_id or not event.pending:
        return state
    return replace(state, phase=Phase.POLLING)


def _attempt(state: ReconciliationState) -> ReconciliationState:
    if not state.can_poll:
        return state
    return replace(state, attempts=state.attempts + 1, busy=True, error=None)


def _escalate(state: ReconciliationState) -> ReconciliationState:
    if state.phase is not Phase.POLLING or state.escalating:
        return state
    return replace(state, escalating=True, busy=True, info=FINALISING_INFO, error=None)


def _fail(state: ReconciliationState, event: AttemptFailed) -> ReconciliationState:
    if state.phase is not Phase.POLLING or state.escalating:
        return state
    message = event.message or GENERIC_CONFIRM_ERROR
    if state.attempts >= state.max_attempts:
        return replace(state, phase=Phase.ERROR, busy=False, error=message)
    return replace(state, busy=False, error=message)


def _email_ready(state: ReconciliationState, event: EmailLinkReady) -> ReconciliationState:
    if not state.escalating:
        return state
    return replace(
        state,
        phase=Phase.AWAITING_EMAIL_CONFIRMATION,
        pending_email=event.email,
        info=event.info,
        cooldown_seconds=state.cooldown_length,
        escalating=False,
        busy=False,
        error=None,
    )


def _escalation_failed(state: ReconciliationState, event: EscalationFailed) -> ReconciliationState:
    if not state.escalating:
        return state
    return replace(state, phase=Phase.ERROR, escalating=False, busy=False, pending_email=None, error=event.message)


def _tick(state: ReconciliationState) -> ReconciliationState:
    if state.cooldown_seconds <= 0:
        return state
    return replace(state, cooldown_seconds=state.cooldown_seconds - 1)


def _resend_started(state: ReconciliationState) -> ReconciliationState:
    if not state.can_resend:
        return state
    return replace(state, resending=True, cooldown_seconds=state.cooldown_length)


def _resend_finished(state: ReconciliationState, event: ResendFinished) -> ReconciliationState:
    if not state.resending:
        return state
    if event.ok:
        return replace(state, resending=False)
    return replace(state, resending=False, cooldown_seconds=0)


def transition(state: ReconciliationState, event: Event) -> ReconciliationState:
    """Return the state after ``event``; events that do not apply are ignored."""

    if isinstance(event, Started):
        return _start(state, event)
    if isinstance(event, AttemptStarted):
        return _attempt(state)
    if isinstance(event, CheckoutConfirmed):
        if state.phase is not Phase.POLLING or state.escalating:
            return state
        return replace(state, phase=Phase.CONFIRMED, busy=False, error=None)
    if isinstance(event, (AuthRequired, StillPending)):
        return _escalate(state)
    if isinstance(event, AttemptFailed):
        return _fail(state, event)
    if isinstance(event, EmailLinkReady):
        return _email_ready(state, event)
    if isinstance(event, EscalationFailed):
        return _escalation_failed(state, event)
    if isinstance(event, CooldownTicked):
        return _tick(state)
    if isinstance(event, ResendStarted):
        return _resend_started(state)
    if isinstance(event, ResendFinished):
        return _resend_finished(state, event)
    raise TypeError(f"Unknown reconciliation event: {event!r}")


__all__ = [
    "AttemptFailed",
    "AttemptStarted",
    "AuthRequired",
    "CheckoutConfirmed",
    "CooldownTicked",
    "DEFAULT_COOLDOWN_SECONDS",
    "DEFAULT_MAX_ATTEMPTS",
    "EmailLinkReady",
    "EscalationFailed",
    "Event",
    "FINALISING_INFO",
    "GENERIC_CONFIRM_ERROR",
    "LINK_SENT_INFO",
    "NETWORK_ERROR",
    "Phase",
    "ReconciliationState",
    "ResendFinished",
    "ResendStarted",
    "Started",
    "StillPending",
    "TERMINAL_PHASES",
    "initial_state",
    "transition",
]
