"""
Dependency injection setup.

This module provides the "container" that wires the client together: one
durable store, one session store, one navigator and one API client shared
by every service. The CLI and the landing server both resolve their
services from here.
"""

import logging
from typing import TYPE_CHECKING, Optional

import httpx

from shared.config import Settings, get_settings
from shared.http import ApiClient
from shared.navigation import LOGIN, Navigator, get_navigator
from shared.storage import JsonFileStorage, KeyValueStore

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.auth.pending import PendingRegistrationStore
    from modules.auth.store import AuthStore
    from modules.referrals.interfaces import IReferralService
    from modules.utilities.interfaces import IUtilitiesService
    from modules.wallet.interfaces import IWalletService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached for the life of
    the container. The session store is rehydrated from durable storage the
    first time it is requested.

    Args:
        storage: Durable store. Defaults to a JSON file at settings.storage_path.
        navigator: Route holder. Defaults to the process-wide navigator.
        transport: httpx transport for the API client (tests pass a mock)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        navigator: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._navigator = navigator
        self._transport = transport
        self._api: Optional[ApiClient] = None
        self._auth_store: "AuthStore | None" = None
        self._pending: "PendingRegistrationStore | None" = None
        self._auth_service: "IAuthService | None" = None
        self._wallet_service: "IWalletService | None" = None
        self._utilities_service: "IUtilitiesService | None" = None
        self._referral_service: "IReferralService | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def storage(self) -> KeyValueStore:
        if self._storage is None:
            self._storage = JsonFileStorage(self.settings.storage_path)
        return self._storage

    @property
    def navigator(self) -> Navigator:
        if self._navigator is None:
            self._navigator = get_navigator()
        return self._navigator

    @property
    def auth_store(self) -> "AuthStore":
        """Get the session store, rehydrated from durable storage."""
        if self._auth_store is None:
            from modules.auth.store import AuthStore
            self._auth_store = AuthStore(self.storage)
            self._auth_store.rehydrate()
        return self._auth_store

    @property
    def pending_registration(self) -> "PendingRegistrationStore":
        if self._pending is None:
            from modules.auth.pending import PendingRegistrationStore
            self._pending = PendingRegistrationStore(self.storage)
        return self._pending

    @property
    def api(self) -> ApiClient:
        """Get the shared API client."""
        if self._api is None:
            self._api = ApiClient(
                self.storage,
                base_url=self.settings.api_url,
                on_unauthorized=self._on_unauthorized,
                transport=self._transport,
            )
        return self._api

    def _on_unauthorized(self) -> None:
        # Any 401 ends the session everywhere, not only in durable storage
        self.auth_store.logout()
        self.navigator.push(LOGIN)

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(self.api)
        return self._auth_service

    @property
    def wallet(self) -> "IWalletService":
        """Get the wallet service instance."""
        if self._wallet_service is None:
            from modules.wallet.service import WalletService
            self._wallet_service = WalletService(self.api)
        return self._wallet_service

    @property
    def utilities(self) -> "IUtilitiesService":
        """Get the utilities service instance."""
        if self._utilities_service is None:
            from modules.utilities.service import UtilitiesService
            self._utilities_service = UtilitiesService(self.api)
        return self._utilities_service

    @property
    def referrals(self) -> "IReferralService":
        """Get the referral service instance."""
        if self._referral_service is None:
            from modules.referrals.service import ReferralService
            self._referral_service = ReferralService(self.api)
        return self._referral_service

    async def aclose(self) -> None:
        """Close the HTTP connection pool, if one was opened."""
        if self._api is not None:
            await self._api.aclose()
            self._api = None

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._api = None
        self._auth_store = None
        self._pending = None
        self._auth_service = None
        self._wallet_service = None
        self._utilities_service = None
        self._referral_service = None


# Module-level container singleton
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests, CLI overrides)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_wallet_service() -> "IWalletService":
    """FastAPI dependency for wallet service."""
    return get_container().wallet


def get_auth_store_dependency() -> "AuthStore":
    """
    FastAPI dependency for the session store.

    The landing server outlives the CLI commands that sign in and out, so
    the store is re-read from durable storage on every request.
    """
    store = get_container().auth_store
    store.rehydrate()
    return store


def get_navigator_dependency() -> Navigator:
    """FastAPI dependency for the navigator."""
    return get_container().navigator
