from __future__ import annotations

import logging

from services.ui_events import FOCUS_EMAIL_TOPIC, TRACK_TOPIC, EventChannel, request_email_focus, track


def test_publish_reaches_subscribers_until_unsubscribed():
    channel = EventChannel()
    received = []
    unsubscribe = channel.subscribe("topic", received.append)

    assert channel.publish("topic", 1) == 1
    unsubscribe()
    unsubscribe()
    assert channel.publish("topic", 2) == 0
    assert received == [1]
    assert channel.subscriber_count("topic") == 0


def test_failing_handler_does_not_block_others(caplog):
    channel = EventChannel()
    received = []

    def broken(_payload):
        raise RuntimeError("boom")

    channel.subscribe("topic", broken)
    channel.subscribe("topic", received.append)
    with caplog.at_level(logging.WARNING):
        delivered = channel.publish("topic", "payload")

    assert delivered == 1
    assert received == ["payload"]
    assert "boom" in caplog.text


def test_track_and_focus_helpers():
    channel = EventChannel()
    tracked, focused = [], []
    channel.subscribe(TRACK_TOPIC, tracked.append)
    channel.subscribe(FOCUS_EMAIL_TOPIC, focused.append)

    track(channel, "success_poll_ready", {"attempts": 2})
    track(None, "ignored")
    request_email_focus(channel, source="hero")

    assert tracked == [{"event": "success_poll_ready", "meta": {"attempts": 2}}]
    assert focused == [{"source": "hero"}]
