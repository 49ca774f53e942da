"""
lifecycle.py
Status model of a multi-camera vehicle event.

A vehicle event is opened (ACTIVE) by its first camera detection, keeps
collecting detections while ACTIVE, and is closed exactly once:

    ACTIVE ──complete()──► COMPLETED
    ACTIVE ──timeout sweep──► TIMEOUT

COMPLETED and TIMEOUT are terminal.
"""

from datetime import datetime, timedelta


ACTIVE = "ACTIVE"
COMPLETED = "COMPLETED"
TIMEOUT = "TIMEOUT"

ALL_STATUSES = (ACTIVE, COMPLETED, TIMEOUT)

_ALLOWED = {
    ACTIVE: {COMPLETED, TIMEOUT},
    COMPLETED: set(),
    TIMEOUT: set(),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if a vehicle event may move from `current` to `target`."""
    return target in _ALLOWED.get(current, set())


def timeout_cutoff(now: datetime, timeout_minutes: int) -> datetime:
    """Events whose last sighting is older than this instant are stale."""
    return now - timedelta(minutes=timeout_minutes)
