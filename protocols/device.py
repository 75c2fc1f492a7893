"""Device-side collaborator protocols (implemented outside the core)."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ConnectivitySignal(Protocol):
    """
    Network state as reported by the platform's network monitor.

    Implemented by services.connectivity.ConnectivityContext.
    """

    @property
    def is_connected(self) -> bool:
        ...

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """
        Register `callback(is_connected)` for connection changes.

        Returns:
            Callable that removes the subscription
        """
        ...


@runtime_checkable
class SessionProvider(Protocol):
    """Authentication/session collaborator exposing the signed-in member."""

    def current_member_code(self) -> str | None:
        """Code of the signed-in member, or None when signed out."""
        ...
