"""
Multi-camera vehicle event endpoints
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.vehicle_events import lifecycle

from ..config import Settings, get_settings
from ..database import get_db
from ..schemas import (
    DetectionIn,
    DetectionVideo,
    EventCameras,
    MetadataIn,
    MetadataOut,
    MigrationResult,
    TimeoutRequest,
    TimeoutResult,
    VehicleEventOut,
    VehicleEventPage,
    VehicleEventStats,
)
from ..services import metadata as metadata_service
from ..services import vehicle_events as service

router = APIRouter(prefix="/api/vehicle-events", tags=["vehicle-events"])

STATUS_PATTERN = f"^({'|'.join(lifecycle.ALL_STATUSES)})$"


@router.post("/detections", response_model=VehicleEventOut, status_code=201)
def process_detection(
    detection: DetectionIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    The ANPR gateway calls this for every plate read.

    Example call from a camera gateway (Python):
    ```
    import requests

    payload = {
        "license_plate": "ABCD12",
        "camera_name": "CAM-GATE-IN",
        "timestamp": "2025-10-26T14:55:03Z",
        "video_path": "videos/gate/20251026_145503.mp4",
        "thumbnail_path": "thumbs/gate/20251026_145503.jpg",
        "confidence": 97.5
    }

    response = requests.post("http://localhost:8000/api/vehicle-events/detections", json=payload)
    print(response.json()["id"])
    ```
    """
    return service.process_detection(
        db,
        detection,
        correlation_window=settings.correlation_window,
        default_confidence=settings.default_confidence,
    )


@router.get("", response_model=VehicleEventPage)
def list_vehicle_events(
    license_plate: Optional[str] = Query(None, description="Plate substring"),
    start_date: Optional[datetime] = Query(None, description="Earliest start time (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="Latest start time (ISO format)"),
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    has_metadata: Optional[bool] = Query(None, description="Documented or not"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    **Examples:**
    - Open visits: `/api/vehicle-events?status=ACTIVE`
    - One truck: `/api/vehicle-events?license_plate=abcd`
    - Undocumented: `/api/vehicle-events?has_metadata=false`
    """
    return service.search_vehicle_events(
        db,
        license_plate=license_plate,
        start_date=start_date,
        end_date=end_date,
        status=status,
        has_metadata=has_metadata,
        page=page,
        limit=limit,
    )


@router.get("/stats", response_model=VehicleEventStats)
def vehicle_event_stats(db: Session = Depends(get_db)):
    return service.vehicle_event_stats(db)


@router.post("/timeout", response_model=TimeoutResult)
def timeout_inactive_events(
    request: Optional[TimeoutRequest] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Run the timeout sweep now instead of waiting for the background sweeper.

    **Example:** `POST /api/vehicle-events/timeout` with `{"timeout_minutes": 45}`
    """
    minutes = settings.timeout_minutes
    if request is not None and request.timeout_minutes is not None:
        minutes = request.timeout_minutes
    return {"events_timed_out": service.timeout_inactive_events(db, minutes)}


@router.post("/migrate", response_model=MigrationResult)
def migrate_all_legacy_events(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Migrate every legacy event that has no detection yet"""
    return {"migrated": service.migrate_all_legacy_events(db, settings.migration_window)}


@router.post("/migrate/{legacy_id}", response_model=VehicleEventOut)
def migrate_legacy_event(
    legacy_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return service.migrate_legacy_event(db, legacy_id, settings.migration_window)


@router.get("/{vehicle_event_id}", response_model=VehicleEventOut)
def get_vehicle_event(vehicle_event_id: str, db: Session = Depends(get_db)):
    return service.get_vehicle_event(db, vehicle_event_id)


@router.put("/{vehicle_event_id}/complete", response_model=VehicleEventOut)
def complete_vehicle_event(vehicle_event_id: str, db: Session = Depends(get_db)):
    """ACTIVE -> COMPLETED. Any other status answers 409."""
    return service.complete_vehicle_event(db, vehicle_event_id)


@router.get("/{vehicle_event_id}/cameras", response_model=EventCameras)
def event_cameras(vehicle_event_id: str, db: Session = Depends(get_db)):
    return service.event_cameras(db, vehicle_event_id)


@router.get("/{vehicle_event_id}/detections/{detection_id}/video", response_model=DetectionVideo)
def detection_video(vehicle_event_id: str, detection_id: str, db: Session = Depends(get_db)):
    return service.detection_video(db, vehicle_event_id, detection_id)


@router.post("/{vehicle_event_id}/metadata", response_model=MetadataOut, status_code=201)
def document_vehicle_event(vehicle_event_id: str, entry: MetadataIn, db: Session = Depends(get_db)):
    return metadata_service.create_vehicle_event_metadata(db, vehicle_event_id, entry)
