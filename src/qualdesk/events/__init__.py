"""Change signals broadcast between independent consumers."""

from qualdesk.events.bus import EventBus, Signal

__all__ = ["EventBus", "Signal"]
