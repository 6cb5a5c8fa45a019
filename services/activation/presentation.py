"""View state for the welcome page derived from the reconciliation state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from services.activation.state import GENERIC_CONFIRM_ERROR, Phase, ReconciliationState

ACTIVATING_TEXT = "Activating your membership…"


class Display(str, Enum):
    NONE = "none"
    ACTIVATING_BANNER = "activating_banner"
    ERROR_BANNER = "error_banner"
    EMAIL_OVERLAY = "email_overlay"
    CONTENT = "content"


@dataclass(frozen=True, slots=True)
class OverlayView:
    email: str
    info: str
    countdown: int
    can_resend: bool
    resending: bool


@dataclass(frozen=True, slots=True)
class ActivationView:
    display: Display
    banner_text: Optional[str] = None
    notice: Optional[str] = None
    overlay: Optional[OverlayView] = None

    @property
    def scroll_locked(self) -> bool:
        return self.overlay is not None


def present(state: ReconciliationState) -> ActivationView:
    if state.phase is Phase.IDLE:
        return ActivationView(Display.NONE)
    if state.phase is Phase.CONFIRMED:
        return ActivationView(Display.CONTENT)
    if state.phase is Phase.ERROR:
        return ActivationView(Display.ERROR_BANNER, banner_text=state.error or GENERIC_CONFIRM_ERROR)
    if state.phase is Phase.AWAITING_EMAIL_CONFIRMATION and state.pending_email:
        overlay = OverlayView(
            email=state.pending_email,
            info=state.info,
            countdown=state.cooldown_seconds,
            can_resend=state.can_resend,
            resending=state.resending,
        )
        return ActivationView(Display.EMAIL_OVERLAY, overlay=overlay)
    # Polling: a failed attempt that will be retried shows as a notice under the banner.
    banner = state.info if state.escalating and state.info else ACTIVATING_TEXT
    return ActivationView(Display.ACTIVATING_BANNER, banner_text=banner, notice=state.error)


__all__ = ["ACTIVATING_TEXT", "ActivationView", "Display", "OverlayView", "present"]
