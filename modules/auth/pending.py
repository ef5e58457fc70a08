"""
Pending registration persisted between the register and verify-OTP steps.

Stored as JSON under ``registrationData``. A record that is missing, does not
parse or is older than the TTL is treated as absent, forcing the user back to
the registration form. The record also carries the time the last code was
resent, so the resend cooldown holds across separate CLI runs.
"""

import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.storage import REGISTRATION_KEY, KeyValueStore

from .models import PendingRegistration

logger = logging.getLogger(__name__)

PENDING_REGISTRATION_TTL = timedelta(hours=1)


class PendingRegistrationStore:
    def __init__(
        self,
        storage: KeyValueStore,
        ttl: timedelta = PENDING_REGISTRATION_TTL,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._ttl = ttl
        self._now = now or (lambda: datetime.now(timezone.utc))

    def save(self, pending: PendingRegistration) -> None:
        self._write(pending.model_copy(update={"saved_at": self._now()}))

    def _write(self, pending: PendingRegistration) -> None:
        self._storage.set_item(
            REGISTRATION_KEY,
            pending.model_dump_json(by_alias=True, exclude_none=True),
        )

    def load(self) -> Optional[PendingRegistration]:
        raw = self._storage.get_item(REGISTRATION_KEY)
        if not raw:
            return None
        try:
            pending = PendingRegistration.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError):
            logger.warning("Ignoring unreadable pending registration")
            return None
        if self._now() - _aware(pending.saved_at) > self._ttl:
            logger.info("Pending registration expired")
            return None
        return pending

    def record_resend(self) -> None:
        """Stamp the pending registration with the time a new code was sent."""
        pending = self.load()
        if pending is not None:
            self._write(pending.model_copy(update={"last_resend_at": self._now()}))

    def resend_available_in(self, cooldown: timedelta) -> int:
        """Whole seconds until another code may be requested (0 = now)."""
        pending = self.load()
        if pending is None or pending.last_resend_at is None:
            return 0
        left = (_aware(pending.last_resend_at) + cooldown - self._now()).total_seconds()
        if left <= 0:
            return 0
        return math.ceil(left)

    def clear(self) -> None:
        self._storage.remove_item(REGISTRATION_KEY)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
