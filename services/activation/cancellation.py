"""Cancellation token shared by every continuation of one activation flow."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Set

Sleeper = Callable[[float], Awaitable[None]]


class CancellationToken:
    """Set once at teardown; checked before any result is applied."""

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: Set["asyncio.Task[object]"] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def track(self, task: "asyncio.Task[object]") -> "asyncio.Task[object]":
        """Cancel ``task`` together with the token; forgotten once it finishes."""
        if self._cancelled:
            task.cancel()
            return task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    async def sleep(self, seconds: float, *, sleeper: Optional[Sleeper] = None) -> bool:
        """Sleep, then report whether the flow is still live."""
        if self._cancelled:
            return False
        await (sleeper or asyncio.sleep)(seconds)
        return not self._cancelled


__all__ = ["CancellationToken", "Sleeper"]
