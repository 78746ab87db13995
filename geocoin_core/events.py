from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List

INVENTORY_CHANGED = "inventoryChanged"
CACHE_CONTENT_CHANGED = "cacheContentChanged"
VISIBLE_CACHES_CHANGED = "visibleCachesChanged"
STORAGE_UNAVAILABLE = "storageUnavailable"
ALL_EVENTS = "*"


@dataclass(frozen=True)
class Event:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {"event": self.name, **self.payload}


Handler = Callable[[Event], None]


class Notifier:
    """Publish/subscribe hub. Handlers registered under "*" receive every event."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, name: str, handler: Handler) -> Handler:
        self._handlers[name].append(handler)
        return handler

    def unsubscribe(self, name: str, handler: Handler) -> None:
        try:
            self._handlers[name].remove(handler)
        except ValueError:
            pass

    def emit(self, name: str, **payload: Any) -> Event:
        event = Event(name, payload)
        # copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(name, ())) + list(self._handlers.get(ALL_EVENTS, ())):
            handler(event)
        return event
