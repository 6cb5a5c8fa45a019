"""Page-scoped publish/subscribe channel for cross-component UI signals."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

ACTIVATION_STATE_TOPIC = "activation.state"
TRACK_TOPIC = "track"
FOCUS_EMAIL_TOPIC = "join.focus_email"

Handler = Callable[[Any], None]


class EventChannel:
    """Synchronous fan-out of events to subscribers of a topic.

    One channel is created per page view and handed to the components that
    need it, so nothing is attached to module or process globals.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""
        self._subscribers[topic].append(handler)

        def _unsubscribe() -> None:
            handlers = self._subscribers.get(topic)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def publish(self, topic: str, payload: Any = None) -> int:
        """Deliver ``payload`` to every handler; returns how many succeeded."""
        delivered = 0
        for handler in list(self._subscribers.get(topic, ())):
            try:
                handler(payload)
            except Exception as exc:  # handlers belong to unrelated components
                logger.warning("UI event handler for %s failed: %s", topic, exc, exc_info=True)
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))


def track(channel: Optional[EventChannel], event: str, meta: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an analytics event on the channel; silently skipped without one."""
    payload: Dict[str, Any] = {"event": event, "meta": dict(meta or {})}
    logger.debug("track %s %s", event, payload["meta"])
    if channel is not None:
        channel.publish(TRACK_TOPIC, payload)


def request_email_focus(channel: EventChannel, *, source: str = "") -> bool:
    """Ask whichever email input is mounted to take focus."""
    return channel.publish(FOCUS_EMAIL_TOPIC, {"source": source}) > 0


__all__ = [
    "ACTIVATION_STATE_TOPIC",
    "EventChannel",
    "FOCUS_EMAIL_TOPIC",
    "TRACK_TOPIC",
    "request_email_focus",
    "track",
]
