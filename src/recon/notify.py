# SPDX-License-Identifier: MIT

import logging
from typing import Callable, TypeAlias

_LOGGER = logging.getLogger(__name__)

ChangeListener: TypeAlias = Callable[[str], None]


class ChangeNotifier:
    """Best-effort "data changed for key K" broadcast to in-process listeners."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, key: str) -> None:
        _LOGGER.debug("notifying %d listener(s) of change to %s", len(self._listeners), key)
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(key)
