"""Fire-and-forget progress notifications for the terminal renderer."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Literal

logger = logging.getLogger(__name__)

ProgressEvent = Literal[
    "scheduled", "resolving", "linking", "building", "rebuilding", "publishing", "done", "error",
]

Listener = Callable[[dict[str, Any]], None]


class ProgressBroadcaster:
    """Event bus keyed by event name.

    ``emit`` never raises: a failing listener is logged and the remaining
    listeners still run.
    """

    def __init__(self):
        self.subscribers: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: ProgressEvent, listener: Listener) -> None:
        self.subscribers[event].append(listener)

    def off(self, event: ProgressEvent, listener: Listener) -> None:
        self.subscribers[event] = [cb for cb in self.subscribers[event] if cb != listener]

    def emit(self, event: ProgressEvent, **payload: Any) -> None:
        for listener in list(self.subscribers.get(event, [])):
            try:
                listener(payload)
            except Exception:
                logger.exception("Progress listener for %r failed", event)
