"""
vehicle_events/adapter.py
Converts legacy single-camera events into the vehicle-event format.

Input (legacy event dict, as serialized by the backend):
    {
        "id": "3f0c...",
        "license_plate": "ABCD12",
        "event_datetime": datetime(2025, 3, 1, 8, 15),
        "camera_name": "Entrada Principal ANPR",
        "video_filename": "entrada_0815.mp4",
        "thumbnail_path": "thumbnails/entrada_0815.jpg",
        "confidence": 97.5,
        "has_metadata": False,
        "metadata": None,
        ...
    }

Output (vehicle event dict):
    {
        "id": "3f0c...",
        "license_plate": "ABCD12",
        "start_time": ..., "end_time": ...,
        "status": "COMPLETED",
        "has_metadata": False,
        "detections": [{"id": "3f0c...-detection-1", ...}],
        "metadata": None,
        ...
    }
"""

from typing import Any, Dict, List

from . import lifecycle

VIDEO_PREFIX = "videos"


def legacy_detection(event: Dict[str, Any], index: int) -> Dict[str, Any]:
    """Build the detection that stands for one legacy event (index is 1-based)."""
    return {
        "id": f"{event['id']}-detection-{index}",
        "camera_name": event["camera_name"],
        "timestamp": event["event_datetime"],
        "video_path": f"{VIDEO_PREFIX}/{event['video_filename']}",
        "thumbnail_path": event.get("thumbnail_path"),
        "confidence": event.get("confidence", 0.0),
        "legacy_event_id": event["id"],
    }


def legacy_to_vehicle_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    A legacy event on its own: start == end, already COMPLETED, one detection.
    """
    return {
        "id": event["id"],
        "license_plate": event["license_plate"],
        "start_time": event["event_datetime"],
        "end_time": event["event_datetime"],
        "status": lifecycle.COMPLETED,
        "has_metadata": bool(event.get("has_metadata")),
        "detections": [legacy_detection(event, 1)],
        "metadata": event.get("metadata"),
        "created_at": event.get("created_at"),
        "updated_at": event.get("updated_at"),
    }


def merge_legacy_events(license_plate: str, ordered: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge legacy events of one plate (sorted oldest first) into a single
    multi-camera vehicle event.
    """
    first, last = ordered[0], ordered[-1]
    documented = next((e for e in ordered if e.get("has_metadata")), None)

    return {
        "id": f"vehicle-{license_plate}-{first['id']}",
        "license_plate": license_plate,
        "start_time": first["event_datetime"],
        "end_time": last["event_datetime"],
        "status": lifecycle.COMPLETED,
        "has_metadata": documented is not None,
        "detections": [legacy_detection(e, i) for i, e in enumerate(ordered, start=1)],
        "metadata": documented.get("metadata") if documented else None,
        "created_at": first.get("created_at"),
        "updated_at": last.get("updated_at"),
    }
