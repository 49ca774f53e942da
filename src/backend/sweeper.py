"""
Background thread that times out stale ACTIVE vehicle events
"""
import logging
from threading import Event, Thread
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import SessionLocal
from .services.vehicle_events import timeout_inactive_events

logger = logging.getLogger(__name__)

_stop_event = Event()
_sweeper_thread: Optional[Thread] = None


def run_sweep(timeout_minutes: int, session_factory: Callable[[], Session] = SessionLocal) -> int:
    """One sweep in its own session"""
    db = session_factory()
    try:
        return timeout_inactive_events(db, timeout_minutes)
    finally:
        db.close()


def scheduled_sweep(interval_seconds: int, timeout_minutes: int, session_factory: Callable[[], Session]):
    """Thread body: sweep every `interval_seconds` until stopped"""
    while not _stop_event.wait(interval_seconds):
        try:
            run_sweep(timeout_minutes, session_factory)
        except SQLAlchemyError as e:
            logger.error("❌ Timeout sweep failed: %s", e)


def start_timeout_sweeper(
    interval_seconds: int,
    timeout_minutes: int,
    session_factory: Callable[[], Session] = SessionLocal,
):
    """Start the background sweeper (no-op if already running)"""
    global _sweeper_thread

    if _sweeper_thread is not None and _sweeper_thread.is_alive():
        return

    _stop_event.clear()
    _sweeper_thread = Thread(
        target=scheduled_sweep,
        args=(interval_seconds, timeout_minutes, session_factory),
        daemon=True,
        name="vehicle-event-timeout",
    )
    _sweeper_thread.start()
    logger.info("Timeout sweeper started (every %ds, timeout %d min)", interval_seconds, timeout_minutes)


def stop_timeout_sweeper():
    """Stop the background sweeper"""
    global _sweeper_thread

    if _sweeper_thread is None:
        return

    _stop_event.set()
    _sweeper_thread.join(timeout=5)
    _sweeper_thread = None
    logger.info("Timeout sweeper stopped")


def is_running() -> bool:
    return _sweeper_thread is not None and _sweeper_thread.is_alive()
