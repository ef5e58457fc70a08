"""
Tiny finite-state-machine helper shared by the flow controllers.

Each flow declares its steps as a str Enum and a transition table; moving
along an edge that is not in the table raises InvalidTransitionError instead
of silently leaving the flow in a half-valid combination of flags.
"""

import logging
import time
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import InvalidTransitionError

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Enum)

Clock = Callable[[], float]


class StateMachine(Generic[S]):
    """
    Current step of a flow plus the edges it may follow.

    Args:
        name: Flow name used in logs and errors
        initial: Starting step
        transitions: step -> set of steps reachable from it
    """

    def __init__(self, name: str, initial: S, transitions: dict[S, set[S]]):
        self._name = name
        self._initial = initial
        self._transitions = transitions
        self._state = initial

    @property
    def state(self) -> S:
        return self._state

    def can_move(self, target: S) -> bool:
        return target in self._transitions.get(self._state, set())

    def move(self, target: S) -> None:
        """Follow the edge to ``target``."""
        if not self.can_move(target):
            raise InvalidTransitionError(self._name, self._state.value, target.value)
        logger.debug(f"{self._name}: {self._state.value} -> {target.value}")
        self._state = target

    def reset(self) -> None:
        """Return to the initial step regardless of the current one."""
        logger.debug(f"{self._name}: reset to {self._initial.value}")
        self._state = self._initial


class Deadline:
    """
    A point in time after which something should happen.

    Flows use it for advisory countdowns (OTP resend) and for the delayed
    auto-reset after a successful purchase. The clock is injectable so tests
    can move time forward.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or time.monotonic
        self._at: Optional[float] = None

    def start(self, seconds: float) -> None:
        self._at = self._clock() + seconds

    def cancel(self) -> None:
        self._at = None

    @property
    def active(self) -> bool:
        return self._at is not None

    def remaining(self) -> int:
        """Whole seconds left, rounded up; 0 when inactive or passed."""
        if self._at is None:
            return 0
        left = self._at - self._clock()
        if left <= 0:
            return 0
        return int(left) if left == int(left) else int(left) + 1

    def expired(self) -> bool:
        return self._at is not None and self._clock() >= self._at
