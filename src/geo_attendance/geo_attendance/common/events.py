from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

_log = logging.getLogger(__name__)

T = TypeVar("T")

Disposer = Callable[[], None]


class EventChannel(Generic[T]):
    """Observer list for one event type.

    ``subscribe`` returns a disposer; calling it more than once is harmless.
    A failing listener is logged and does not stop delivery to the others.
    """

    def __init__(self, name: str):
        self._name = name
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Disposer:
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def emit(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                _log.exception("Error in %s listener", self._name)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
