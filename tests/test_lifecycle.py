from datetime import timedelta

import pytest

from builders import T0

from src.vehicle_events import lifecycle


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (lifecycle.ACTIVE, lifecycle.COMPLETED, True),
        (lifecycle.ACTIVE, lifecycle.TIMEOUT, True),
        (lifecycle.COMPLETED, lifecycle.ACTIVE, False),
        (lifecycle.COMPLETED, lifecycle.TIMEOUT, False),
        (lifecycle.TIMEOUT, lifecycle.COMPLETED, False),
        (lifecycle.ACTIVE, lifecycle.ACTIVE, False),
    ],
)
def test_can_transition(current, target, allowed):
    assert lifecycle.can_transition(current, target) is allowed


def test_timeout_cutoff():
    assert lifecycle.timeout_cutoff(T0 + timedelta(hours=1), 30) == T0 + timedelta(minutes=30)


def test_all_statuses():
    assert set(lifecycle.ALL_STATUSES) == {"ACTIVE", "COMPLETED", "TIMEOUT"}
