"""Connectivity context: explicit network state fed by the platform monitor."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ConnectivityContext:
    """
    Current connectivity, passed explicitly to whoever needs it.

    The platform's network monitor calls update() on every state event.
    Subscribers hear about changes of the connected flag only.
    """

    def __init__(self, is_connected: bool = True, connection_type: str = "unknown"):
        self._is_connected = is_connected
        self.connection_type = connection_type
        self._subscribers: list[Callable[[bool], None]] = []

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    def update(self, is_connected: bool, connection_type: str | None = None) -> bool:
        """
        Record a new network state.

        Returns:
            True if the connected flag changed
        """
        was_connected = self._is_connected
        self._is_connected = bool(is_connected)
        if connection_type is not None:
            self.connection_type = connection_type

        if was_connected == self._is_connected:
            return False

        logger.info(
            "Network %s (%s)",
            "online" if self._is_connected else "offline",
            self.connection_type,
        )
        for callback in list(self._subscribers):
            callback(self._is_connected)
        return True

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
