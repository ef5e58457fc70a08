"""Tests for shared/fsm.py."""

from enum import Enum

import pytest

from shared.exceptions import InvalidTransitionError
from shared.fsm import Deadline, StateMachine


class Light(str, Enum):
    RED = "red"
    GREEN = "green"
    AMBER = "amber"


def make_machine() -> StateMachine[Light]:
    return StateMachine(
        "light",
        Light.RED,
        {
            Light.RED: {Light.GREEN},
            Light.GREEN: {Light.AMBER},
            Light.AMBER: {Light.RED},
        },
    )


class TestStateMachine:
    def test_starts_at_initial(self):
        assert make_machine().state == Light.RED

    def test_follows_edges(self):
        machine = make_machine()
        machine.move(Light.GREEN)
        machine.move(Light.AMBER)
        assert machine.state == Light.AMBER

    def test_rejects_missing_edge(self):
        """Moving along an undeclared edge should raise and keep the state."""
        machine = make_machine()
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.move(Light.AMBER)

        assert machine.state == Light.RED
        assert exc_info.value.details == {"flow": "light", "source": "red", "target": "amber"}

    def test_can_move(self):
        machine = make_machine()
        assert machine.can_move(Light.GREEN)
        assert not machine.can_move(Light.RED)

    def test_reset(self):
        """Reset should return to the initial step from anywhere."""
        machine = make_machine()
        machine.move(Light.GREEN)
        machine.reset()
        assert machine.state == Light.RED


class TestDeadline:
    def test_inactive_by_default(self, clock):
        deadline = Deadline(clock)
        assert not deadline.active
        assert not deadline.expired()
        assert deadline.remaining() == 0

    def test_counts_down(self, clock):
        """Remaining should round partial seconds up."""
        deadline = Deadline(clock)
        deadline.start(60)
        assert deadline.remaining() == 60

        clock.advance(0.5)
        assert deadline.remaining() == 60

        clock.advance(59)
        assert deadline.remaining() == 1
        assert not deadline.expired()

    def test_expires(self, clock):
        deadline = Deadline(clock)
        deadline.start(2)
        clock.advance(2)
        assert deadline.expired()
        assert deadline.remaining() == 0

    def test_cancel(self, clock):
        deadline = Deadline(clock)
        deadline.start(2)
        deadline.cancel()
        clock.advance(5)
        assert not deadline.expired()
        assert not deadline.active
