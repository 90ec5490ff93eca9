"""
Event bus for bbox-overlay.
Lets the renderer and diagnostics surface react to session changes
without the session knowing about them.
"""

from __future__ import annotations
from typing import Dict, List, Callable, Any, Optional
from collections import defaultdict
import inspect
import weakref
from dataclasses import dataclass
from datetime import datetime

from .interfaces import IEventBus, ILogger


@dataclass
class EventData:
    """Container for event data."""
    event_type: str
    data: Any
    timestamp: datetime


class _StrongRef:
    """Mimics a weak reference for plain functions, which are kept alive."""

    def __init__(self, func: Callable):
        self._func = func

    def __call__(self) -> Callable:
        return self._func


class EventBus(IEventBus):
    """Synchronous publish/subscribe with bounded history."""

    def __init__(self, logger: ILogger, max_history: int = 1000):
        self._logger = logger
        self._handlers: Dict[str, List[Any]] = defaultdict(list)
        self._event_history: List[EventData] = []
        self._max_history = max_history

    def subscribe(self, event_type: str, handler: Callable) -> None:
        if not callable(handler):
            self._logger.error(f"Handler for event '{event_type}' is not callable")
            return

        # Bound methods are held weakly so subscribers can be collected
        if inspect.ismethod(handler):
            ref = weakref.WeakMethod(handler)
        else:
            ref = _StrongRef(handler)

        self._handlers[event_type].append(ref)
        self._logger.debug(f"Subscribed to event '{event_type}'", handler=str(handler))

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [
            ref for ref in self._handlers[event_type]
            if ref() is not None and ref() != handler
        ]
        if not self._handlers[event_type]:
            del self._handlers[event_type]

        self._logger.debug(f"Unsubscribed from event '{event_type}'", handler=str(handler))

    def publish(self, event_type: str, data: Any = None) -> None:
        self._add_to_history(EventData(event_type=event_type, data=data, timestamp=datetime.now()))

        handlers = self._handlers.get(event_type, [])
        if not handlers:
            return

        dead_handlers = []
        for ref in list(handlers):
            handler = ref()
            if handler is None:
                dead_handlers.append(ref)
                continue
            try:
                if data is not None:
                    handler(data)
                else:
                    handler()
            except Exception as e:
                # a broken subscriber must not break ingestion
                self._logger.error(
                    f"Error in event handler for '{event_type}'",
                    exception=e,
                    handler=str(handler)
                )

        for ref in dead_handlers:
            handlers.remove(ref)

        self._logger.debug(f"Published event '{event_type}' to {len(handlers)} handlers")

    def _add_to_history(self, event_data: EventData) -> None:
        self._event_history.append(event_data)
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

    def get_event_history(self, event_type: Optional[str] = None,
                          limit: Optional[int] = None) -> List[EventData]:
        history = self._event_history
        if event_type:
            history = [e for e in history if e.event_type == event_type]
        if limit:
            history = history[-limit:]
        return list(history)

    def clear_history(self) -> None:
        self._event_history.clear()

    def get_subscriber_count(self, event_type: Optional[str] = None) -> Dict[str, int]:
        if event_type:
            return {event_type: len(self._handlers.get(event_type, []))}
        return {et: len(handlers) for et, handlers in self._handlers.items()}
