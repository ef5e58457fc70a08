"""
Session guard for authenticated pages.

Advisory only: it keeps an unauthenticated user away from pages that need a
session, but the backend still authorises every call on its own.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from shared.navigation import LOGIN, Navigator

from .models import AuthState
from .store import AuthStore

logger = logging.getLogger(__name__)


class GuardStatus(str, Enum):
    """What a guarded page should render."""

    LOADING = "loading"        # Session not resolved yet: show a placeholder
    REDIRECTING = "redirecting"  # No session: navigation to login issued
    ALLOWED = "allowed"        # Render the page


def evaluate(state: AuthState) -> GuardStatus:
    """Decide what a guarded page may show for a given snapshot."""
    if state.is_authenticated:
        return GuardStatus.ALLOWED
    if state.is_auth_loading:
        return GuardStatus.LOADING
    return GuardStatus.REDIRECTING


class SessionGuard:
    """
    Wraps a page that requires authentication.

    Evaluates the store on creation and on every store change, sending the
    user to the login route whenever the session is resolved and absent.
    Call ``close`` when the page goes away.
    """

    def __init__(self, store: AuthStore, navigator: Navigator):
        self._store = store
        self._navigator = navigator
        self._status = GuardStatus.LOADING
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(self._on_change)
        self._on_change(store.state)

    @property
    def status(self) -> GuardStatus:
        return self._status

    @property
    def allowed(self) -> bool:
        return self._status is GuardStatus.ALLOWED

    def _on_change(self, state: AuthState) -> None:
        status = evaluate(state)
        if status is GuardStatus.REDIRECTING and self._status is not GuardStatus.REDIRECTING:
            logger.info("No session, redirecting to login")
            self._navigator.push(LOGIN)
        self._status = status

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "SessionGuard":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
