from __future__ import annotations

from typing import Any, Callable, Dict, List, Type

import structlog

from ...domain.ports import EventDispatcher

logger = structlog.get_logger(__name__)

Listener = Callable[[Any], None]


class ListenerDispatcher(EventDispatcher):
    """
    Minimal in-process EventDispatcher.

    Listeners are registered per event type and called synchronously, in
    registration order. A failing listener is logged and does not prevent
    the remaining listeners from running.
    """

    def __init__(self) -> None:
        self._listeners: Dict[Type[Any], List[Listener]] = {}

    def listen(self, event_type: Type[Any], listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def forget(self, event_type: Type[Any]) -> None:
        self._listeners.pop(event_type, None)

    def has_listeners(self, event_type: Type[Any]) -> bool:
        return bool(self._listeners.get(event_type))

    def dispatch(self, event: object) -> None:
        for listener in list(self._listeners.get(type(event), ())):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "jwt_event_listener_failed",
                    event_type=type(event).__name__,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                )


class NullDispatcher(EventDispatcher):
    """Dispatcher used when the host does not care about events."""

    def dispatch(self, event: object) -> None:
        return None
