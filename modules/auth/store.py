"""
Session store.

Holds the one authoritative copy of the session. ``set_auth`` and ``logout``
are the only writers; every reader gets an immutable AuthState snapshot.
The ServiceContainer owns the one instance a process uses.

Persisted layout (durable storage):
- ``auth-storage``: {"version": 1, "state": {"user": {...}, "token": "..."}}
- ``token`` / ``user``: mirrors read directly by the API client
"""

import json
import logging
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.storage import AUTH_STORAGE_KEY, TOKEN_KEY, USER_KEY, KeyValueStore

from .models import AuthState, User

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

Listener = Callable[[AuthState], None]


class AuthStore:
    """
    Session state shared by every flow and guard in the process.

    Starts in the loading state until ``rehydrate`` (or a write) resolves it.
    """

    def __init__(self, storage: KeyValueStore):
        self._storage = storage
        self._state = AuthState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_auth_loading(self) -> bool:
        return self._state.is_auth_loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new snapshot after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def rehydrate(self) -> AuthState:
        """Load the persisted session, then leave the loading state."""
        user, token = self._read_persisted()
        if token and self._storage.get_item(TOKEN_KEY) != token:
            self._storage.set_item(TOKEN_KEY, token)
        self._replace(
            AuthState(
                user=user if token else None,
                token=token,
                is_authenticated=token is not None,
                is_auth_loading=False,
            )
        )
        return self._state

    def _read_persisted(self) -> tuple[Optional[User], Optional[str]]:
        raw = self._storage.get_item(AUTH_STORAGE_KEY)
        if not raw:
            return None, None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable persisted session")
            return None, None
        if not isinstance(record, dict) or record.get("version") != SCHEMA_VERSION:
            logger.warning("Discarding persisted session with unknown schema version")
            return None, None

        state = record.get("state") or {}
        token = state.get("token") or None
        user_data = state.get("user")
        user = None
        if user_data:
            try:
                user = User.model_validate(user_data)
            except PydanticValidationError:
                logger.warning("Discarding persisted user record that no longer parses")
        return user, token

    def set_auth(self, user: User, token: str) -> None:
        """Establish a session: persist it, then publish the new snapshot."""
        user_json = user.model_dump(by_alias=True, mode="json")
        self._storage.set_item(TOKEN_KEY, token)
        self._storage.set_item(USER_KEY, json.dumps(user_json))
        self._storage.set_item(
            AUTH_STORAGE_KEY,
            json.dumps(
                {"version": SCHEMA_VERSION, "state": {"user": user_json, "token": token}}
            ),
        )
        logger.info(f"Session established for {user.email}")
        self._replace(
            AuthState(user=user, token=token, is_authenticated=True, is_auth_loading=False)
        )

    def logout(self) -> None:
        """Destroy the session everywhere it was persisted."""
        self._storage.remove_item(TOKEN_KEY)
        self._storage.remove_item(USER_KEY)
        self._storage.remove_item(AUTH_STORAGE_KEY)
        logger.info("Session cleared")
        self._replace(AuthState(is_authenticated=False, is_auth_loading=False))

    establish = set_auth
    clear = logout
