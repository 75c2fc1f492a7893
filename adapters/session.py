"""Pointsman adapter: SessionProvider backed by a Django session."""

from __future__ import annotations

SESSION_KEY = "pointsman_member_code"


class DjangoSessionProvider:
    """
    Adapter: reads the signed-in member from `request.session`.

    Any mapping works, so tests can pass a plain dict.
    """

    def __init__(self, session, key: str = SESSION_KEY):
        self.session = session
        self.key = key

    def current_member_code(self) -> str | None:
        return self.session.get(self.key) or None

    def sign_in(self, member_code: str) -> None:
        self.session[self.key] = member_code

    def sign_out(self) -> None:
        self.session.pop(self.key, None)
