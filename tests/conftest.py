"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import json
from typing import Any, Optional

import httpx
import pytest

from api.dependencies import reset_container
from modules.auth.models import User
from modules.auth.store import AuthStore
from shared.config import get_settings
from shared.models import ApiResponse
from shared.navigation import Navigator, reset_navigator
from shared.storage import AUTH_STORAGE_KEY, MemoryStorage


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset process-wide singletons before and after each test."""
    reset_navigator()
    reset_container()
    get_settings.cache_clear()
    yield
    reset_navigator()
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def user_payload() -> dict[str, Any]:
    """A user record as the backend sends it."""
    return {
        "_id": "665f1c2e8b1d4a0012345678",
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@x.com",
        "phone": "08012345678",
        "isActive": True,
        "isEmailVerified": True,
        "createdAt": "2024-01-05T14:30:00.000Z",
        "updatedAt": "2024-01-05T14:30:00.000Z",
    }


@pytest.fixture
def user(user_payload) -> User:
    return User.model_validate(user_payload)


@pytest.fixture
def store(storage) -> AuthStore:
    """A resolved, signed-out session store."""
    auth_store = AuthStore(storage)
    auth_store.rehydrate()
    return auth_store


@pytest.fixture
def signed_in_store(store, user) -> AuthStore:
    store.set_auth(user, "tok-123")
    return store


@pytest.fixture
def transaction_payload():
    """Factory for transaction records as the backend sends them."""

    def build(**overrides):
        payload = {
            "_id": "tx-1",
            "userId": "u-1",
            "walletId": "w-1",
            "type": "debit",
            "category": "electricity_purchase",
            "amount": 1500,
            "balanceBefore": 5000,
            "balanceAfter": 3500,
            "status": "successful",
            "reference": "REF-1-ABC",
            "description": "AEDC prepaid",
            "token": "1234-5678-9012",
            "metadata": {"meter_number": "04123456789"},
            "createdAt": "2024-01-05T14:30:00.000Z",
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def envelope():
    """Build a backend envelope the way ApiClient returns it."""

    def build(
        data: Any = None,
        success: bool = True,
        message: str = "",
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> ApiResponse:
        return ApiResponse[Any](success=success, message=message, data=data, errors=errors)

    return build


# ----------------------------------------------------------------------------
# Fake backend
# ----------------------------------------------------------------------------


@pytest.fixture
def backend_routes() -> dict[str, tuple[int, Any]]:
    """Path suffix -> (status, JSON body) answered by the fake backend."""
    return {}


@pytest.fixture
def backend_requests() -> list[httpx.Request]:
    """Every request the fake backend received, in order."""
    return []


@pytest.fixture
def transport(backend_routes, backend_requests) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        backend_requests.append(request)
        for suffix, (status_code, body) in backend_routes.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(status_code, json=body)
        return httpx.Response(404, json={"success": False, "message": "Not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def session_storage(user_payload) -> MemoryStorage:
    """Durable storage holding a persisted session."""
    return MemoryStorage(
        {
            AUTH_STORAGE_KEY: json.dumps(
                {"version": 1, "state": {"user": user_payload, "token": "tok-123"}}
            )
        }
    )
