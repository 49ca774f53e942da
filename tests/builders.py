"""Shared data builders for the test suite.

- ``T0``            – fixed reference instant (naive UTC)
- ``add_event``     – insert one legacy single-camera event row
- ``legacy_dict``   – legacy event as the grouping helpers receive it
- ``detection_in``  – request body for a live camera detection
"""

from datetime import datetime, timedelta

from src.backend.models import Event
from src.backend.schemas import DetectionIn

T0 = datetime(2025, 3, 1, 8, 0)


def add_event(db, plate, when, camera="CAM-GATE-IN", video="clip.mp4", confidence=95.0):
    event = Event(
        license_plate=plate,
        event_datetime=when,
        camera_name=camera,
        video_filename=video,
        confidence=confidence,
    )
    db.add(event)
    db.commit()
    return event


def legacy_dict(event_id, plate, minutes, camera="CAM-GATE-IN", has_metadata=False, metadata=None):
    return {
        "id": event_id,
        "license_plate": plate,
        "event_datetime": T0 + timedelta(minutes=minutes),
        "camera_name": camera,
        "video_filename": f"{event_id}.mp4",
        "thumbnail_path": None,
        "confidence": 95.0,
        "has_metadata": has_metadata,
        "metadata": metadata,
    }


def detection_in(plate, when, camera="CAM-GATE-IN", confidence=None):
    return DetectionIn(
        license_plate=plate,
        camera_name=camera,
        timestamp=when,
        video_path=f"videos/{camera}/{when:%H%M%S}.mp4",
        confidence=confidence,
    )
