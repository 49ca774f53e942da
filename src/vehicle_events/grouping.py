"""
grouping.py
Time-window correlation of ANPR sightings into vehicle events.

Two flavours live here:

- Live correlation (`correlation_cutoff`, `extend_time_span`) is used by the
  backend when a camera reports a new detection: the detection joins the
  plate's ACTIVE event if that event started inside the correlation window.
- Batch grouping (`group_legacy_events`, `related_vehicle_event`) turns
  already-stored single-camera events into multi-camera vehicle events:
  rows of one plate are merged when the whole group spans at most the
  grouping window, otherwise each row stays on its own.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .adapter import legacy_to_vehicle_event, merge_legacy_events

DEFAULT_CORRELATION_WINDOW = timedelta(hours=2)
DEFAULT_GROUPING_WINDOW = timedelta(hours=4)
DEFAULT_MIGRATION_WINDOW = timedelta(minutes=30)


def normalize_plate(plate: str) -> str:
    return (plate or "").strip().upper()


###########################
# Live detection helpers  #
###########################

def correlation_cutoff(timestamp: datetime, window: timedelta = DEFAULT_CORRELATION_WINDOW) -> datetime:
    """Earliest start_time an ACTIVE event may have to absorb `timestamp`."""
    return timestamp - window


def extend_time_span(start: datetime, end: Optional[datetime], timestamp: datetime) -> Tuple[datetime, datetime]:
    """
    Widen [start, end] so it covers `timestamp`.
    Late-arriving (out of order) detections never move end_time backwards.
    """
    end = end or start
    return min(start, timestamp), max(end, timestamp)


def migration_bounds(moment: datetime, window: timedelta = DEFAULT_MIGRATION_WINDOW) -> Tuple[datetime, datetime]:
    """Range of start_time values a legacy row may be attached to."""
    return moment - window, moment + window


###########################
# Batch grouping          #
###########################

def _group_by_plate(events: Iterable[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    grouped: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
    for event in events:
        grouped.setdefault(event["license_plate"], []).append(event)
    return grouped


def group_legacy_events(
    events: Iterable[Dict[str, Any]],
    window: timedelta = DEFAULT_GROUPING_WINDOW,
) -> List[Dict[str, Any]]:
    """
    Group legacy events by license plate.

    For each plate:
      - a single event is converted as is
      - several events are merged into one multi-camera vehicle event when
        max(event_datetime) - min(event_datetime) <= window
      - otherwise every event becomes its own vehicle event

    Returns vehicle event dicts, newest start_time first.
    """
    vehicle_events: List[Dict[str, Any]] = []

    for plate, group in _group_by_plate(events).items():
        if len(group) == 1:
            vehicle_events.append(legacy_to_vehicle_event(group[0]))
            continue

        ordered = sorted(group, key=lambda e: e["event_datetime"])
        span = ordered[-1]["event_datetime"] - ordered[0]["event_datetime"]

        if span <= window:
            vehicle_events.append(merge_legacy_events(plate, ordered))
        else:
            vehicle_events.extend(legacy_to_vehicle_event(e) for e in ordered)

    vehicle_events.sort(key=lambda ve: ve["start_time"], reverse=True)
    return vehicle_events


def related_events(
    events: Iterable[Dict[str, Any]],
    event: Dict[str, Any],
    window: timedelta = DEFAULT_GROUPING_WINDOW,
) -> List[Dict[str, Any]]:
    """Events of the same plate within +/- window of `event` (itself included)."""
    moment = event["event_datetime"]
    return [
        e for e in events
        if e["license_plate"] == event["license_plate"]
        and abs(e["event_datetime"] - moment) <= window
    ]


def related_vehicle_event(
    events: Iterable[Dict[str, Any]],
    event: Dict[str, Any],
    window: timedelta = DEFAULT_GROUPING_WINDOW,
) -> Optional[Dict[str, Any]]:
    """
    Multi-camera vehicle event that `event` belongs to, or None when no
    other camera saw the plate close enough in time.
    """
    related = related_events(events, event, window)
    if len(related) <= 1:
        return None

    for vehicle_event in group_legacy_events(related, window):
        if any(d["legacy_event_id"] == event["id"] for d in vehicle_event["detections"]):
            return vehicle_event
    return None
