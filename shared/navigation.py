"""
Client-side navigation.

Flows never render anything themselves; they ask the navigator to move to a
route and the presentation layer decides what that means (print a hint,
answer with an HTTP redirect, open a browser). External navigation leaves the
application entirely, as the payment gateway redirect does.
"""

import logging
from typing import Callable, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

logger = logging.getLogger(__name__)


HOME = "/"
LOGIN = "/login"
REGISTER = "/register"
VERIFY_OTP = "/verify-otp"
FORGOT_PASSWORD = "/forgot-password"
DASHBOARD = "/dashboard"
PROFILE = "/profile"
WALLET = "/wallet"
PAYMENT_SUCCESS = "/payment/success"
PAYMENT_FAILED = "/payment/failed"


Listener = Callable[[str], None]


def query_params(location: str) -> dict[str, str]:
    """First value of every query parameter of a location or full URL."""
    parsed = parse_qs(urlsplit(location).query)
    return {key: values[0] for key, values in parsed.items()}


class Navigator:
    """
    Tracks the current route and notifies listeners on every change.

    Args:
        on_external: Called with the URL when navigation leaves the app.
                     Defaults to only recording the URL.
    """

    def __init__(self, on_external: Optional[Callable[[str], None]] = None):
        self._current = HOME
        self._history: list[str] = []
        self._listeners: list[Listener] = []
        self._on_external = on_external
        self.external_url: Optional[str] = None

    @property
    def current(self) -> str:
        """Current location including any query string."""
        return self._current

    @property
    def path(self) -> str:
        return urlsplit(self._current).path

    @property
    def query(self) -> dict[str, str]:
        """First value of every query parameter of the current location."""
        return query_params(self._current)

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def push(self, path: str, query: Optional[dict[str, str]] = None) -> str:
        """Navigate to an in-app route. Returns the full location."""
        location = f"{path}?{urlencode(query)}" if query else path
        self._history.append(self._current)
        self._current = location
        logger.debug(f"Navigate -> {location}")
        for listener in list(self._listeners):
            listener(location)
        return location

    def redirect_external(self, url: str) -> None:
        """Full navigation to a page outside the application."""
        logger.info(f"Leaving app for {url}")
        self.external_url = url
        if self._on_external is not None:
            self._on_external(url)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a route listener. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


_navigator: Optional[Navigator] = None


def get_navigator() -> Navigator:
    """Get the process-wide navigator."""
    global _navigator
    if _navigator is None:
        _navigator = Navigator()
    return _navigator


def set_navigator(navigator: Navigator) -> None:
    """Install a navigator (the CLI installs one that opens a browser)."""
    global _navigator
    _navigator = navigator


def reset_navigator() -> None:
    """Reset the navigator singleton (for testing)."""
    global _navigator
    _navigator = None
