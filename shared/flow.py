"""
Base class for flow controllers.

A flow owns a StateMachine plus the view state every page shows: an inline
error banner, per-field validation messages and a busy flag. Backend calls go
through ``_call`` so failures of every kind end up in ``error`` and the flow
stays on its current step.
"""

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Generic, Optional, TypeVar

from pydantic import BaseModel

from .exceptions import RechargeError, ValidationError, error_message
from .forms import validate_form
from .fsm import Clock, StateMachine
from .models import ApiResponse

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Enum)
F = TypeVar("F", bound=BaseModel)


class Flow(Generic[S]):
    """Shared plumbing for the page-level state machines."""

    def __init__(self, machine: StateMachine[S], clock: Optional[Clock] = None):
        self._machine = machine
        self._clock = clock or time.monotonic
        self.error = ""
        self.field_errors: dict[str, str] = {}
        self.is_loading = False

    @property
    def step(self) -> S:
        """Current step, after applying any timer that has fired."""
        self.poll()
        return self._machine.state

    def poll(self) -> None:
        """Apply expired timers. Flows with delayed resets override this."""

    def _clear_errors(self) -> None:
        self.error = ""
        self.field_errors = {}

    def _validate(self, form: type[F], data: dict[str, Any]) -> Optional[F]:
        """Run client-side validation; on failure record messages and return None."""
        self._clear_errors()
        try:
            return validate_form(form, data)
        except ValidationError as e:
            self.field_errors = e.fields
            self.error = e.message
            return None

    async def _call(
        self,
        request: Awaitable[ApiResponse],
        fallback: str,
    ) -> Optional[ApiResponse]:
        """
        Await a backend call and return the envelope only when it succeeded.

        Any failure (raised or ``success: false``) is written to ``error``.
        """
        self.is_loading = True
        self.error = ""
        try:
            response = await request
        except RechargeError as e:
            logger.debug(f"{type(self).__name__}: call failed: {e.code}")
            self.error = error_message(e, fallback)
            return None
        finally:
            self.is_loading = False

        if not response.success:
            self.error = response.message or response.first_error() or fallback
            return None
        return response
