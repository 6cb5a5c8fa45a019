"""Run the post-checkout activation flow for a welcome-page URL from the shell."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Optional, Sequence

from scripts._path import add_root

add_root()

from core.env_utils import load_dotenv_if_available  # noqa: E402

load_dotenv_if_available()

from core.logging import setup_logging  # noqa: E402
from core.settings import ActivationSettings  # noqa: E402
from services.activation import ActivationReconciler, Display, Phase, ReconciliationState, build_reconciler  # noqa: E402
from services.activation import present  # noqa: E402
from services.ui_events import ACTIVATION_STATE_TOPIC, TRACK_TOPIC, EventChannel  # noqa: E402

logger = logging.getLogger(__name__)

SUCCESS_PHASES = frozenset({Phase.CONFIRMED, Phase.AWAITING_EMAIL_CONFIRMATION})


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", required=True, help="Welcome-page URL carrying ?pending=1&cs=<session id>.")
    parser.add_argument("--already-paid", action="store_true", help="Skip polling; the account is known to be paid.")
    parser.add_argument("--state-file", type=Path, help="JSON file remembering which activation links were sent.")
    parser.add_argument("--max-attempts", type=_positive_int, help="Confirmation attempts before giving up.")
    parser.add_argument("--retry-delay", type=_non_negative_float, help="Seconds between confirmation attempts.")
    parser.add_argument("--verbose", action="store_true", help="Log every state change and tracked event.")
    return parser


def resolve_settings(args: argparse.Namespace, base: Optional[ActivationSettings] = None) -> ActivationSettings:
    settings = base or ActivationSettings.from_env()
    overrides = {}
    if args.state_file is not None:
        overrides["sent_links_path"] = args.state_file
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    if args.retry_delay is not None:
        overrides["retry_delay_seconds"] = args.retry_delay
    return dataclasses.replace(settings, **overrides) if overrides else settings


def describe(state: ReconciliationState) -> str:
    view = present(state)
    if view.display is Display.EMAIL_OVERLAY and view.overlay is not None:
        return f"Check {view.overlay.email}: {view.overlay.info}"
    if view.display is Display.CONTENT:
        return "Membership active."
    if view.display is Display.NONE:
        return "Nothing to activate."
    return view.banner_text or ""


async def run_flow(reconciler: ActivationReconciler, *, already_paid: bool) -> ReconciliationState:
    async with reconciler:
        return await reconciler.run(already_paid=already_paid)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else None)

    settings = resolve_settings(args)
    channel = EventChannel()
    if args.verbose:
        channel.subscribe(ACTIVATION_STATE_TOPIC, lambda state: logger.debug("state %s", state))
        channel.subscribe(TRACK_TOPIC, lambda payload: logger.debug("track %s", payload))

    try:
        reconciler = build_reconciler(
            args.url,
            settings=settings,
            channel=channel,
            on_url_replace=lambda url: logger.info("Cleaned URL: %s", url),
        )
    except RuntimeError as exc:
        logger.error("Activation is not configured: %s", exc)
        return 1

    state = asyncio.run(run_flow(reconciler, already_paid=args.already_paid))
    print(describe(state))
    if state.phase in SUCCESS_PHASES:
        return 0
    if state.phase is Phase.IDLE:
        logger.info("No pending checkout session in %s", args.url)
        return 0
    return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
