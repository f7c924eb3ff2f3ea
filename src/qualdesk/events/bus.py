"""Typed broadcast channel for "data changed, please refresh" signals."""

import inspect
import logging
from collections import defaultdict
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Handler = Callable[[], Union[None, Awaitable[None]]]


class Signal(str, Enum):
    """Signals published after writes to the remote store."""

    RECORDS_CHANGED = "records_changed"
    STATS_CHANGED = "stats_changed"


class EventBus:
    """
    Publish/subscribe channel without payloads.

    A signal reaches the handlers subscribed when publish() is called; late
    subscribers get nothing. Handlers may be plain functions or coroutine
    functions and are run one after another. A handler that raises is logged
    and does not prevent delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[Signal, list[Handler]] = defaultdict(list)

    def subscribe(self, signal: Signal, handler: Handler) -> Callable[[], None]:
        """Register handler for signal; returns a callable that unsubscribes it."""
        self._handlers[signal].append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(signal, handler)

        return unsubscribe

    def unsubscribe(self, signal: Signal, handler: Handler) -> None:
        handlers = self._handlers.get(signal)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handler_count(self, signal: Optional[Signal] = None) -> int:
        if signal is None:
            return sum(len(h) for h in self._handlers.values())
        return len(self._handlers.get(signal, []))

    async def publish(self, signal: Signal) -> int:
        """Deliver signal to current subscribers. Returns how many ran cleanly."""
        handlers = list(self._handlers.get(signal, []))
        logger.debug("Publishing %s to %d handler(s)", signal.value, len(handlers))

        delivered = 0
        for handler in handlers:
            try:
                result = handler()
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception("Handler for %s failed", signal.value)
        return delivered

    def clear(self) -> None:
        self._handlers.clear()
