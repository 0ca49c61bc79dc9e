"""Simple in-process event bus."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

EventHandler = Callable[[Any], None]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: Any) -> None:
        for handler in self._subscribers.get(event.event_type, []):
            handler(event)


EVENT_BUS_KEY = "event_bus"


def get_event_bus() -> EventBus:
    """The bus owned by the running application."""
    from flask import current_app

    return current_app.extensions[EVENT_BUS_KEY]
