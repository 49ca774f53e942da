"""
Legacy single-camera event endpoints
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..schemas import EventDays, EventIn, EventOut, EventPage, EventStats, EventVideo
from ..services import events as service

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=201)
def create_event(event: EventIn, db: Session = Depends(get_db)):
    """
    Store one camera event.

    **Example:**
    ```
    {
        "license_plate": "ABCD12",
        "event_datetime": "2025-10-26T14:55:03Z",
        "camera_name": "CAM-GATE-IN",
        "video_filename": "20251026_145503.mp4"
    }
    ```
    """
    return service.create_event(db, event)


@router.get("", response_model=EventPage)
def list_events(
    license_plate: Optional[str] = Query(None, description="Plate substring"),
    start_date: Optional[datetime] = Query(None, description="Start date (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="End date (ISO format)"),
    camera_name: Optional[str] = Query(None, description="Camera name substring"),
    company_id: Optional[str] = Query(None, description="Documented for this company"),
    has_metadata: Optional[bool] = Query(None, description="Documented or not"),
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    sort_by: str = Query("event_datetime", pattern="^(event_datetime|license_plate)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    """
    Dashboard calls this to populate the events table.

    **Examples:**
    - All events: `/api/events`
    - By camera: `/api/events?camera_name=gate`
    - Undocumented: `/api/events?has_metadata=false`
    - Date range: `/api/events?start_date=2025-10-20T00:00:00Z&end_date=2025-10-25T23:59:59Z`
    """
    return service.search_events(
        db,
        license_plate=license_plate,
        start_date=start_date,
        end_date=end_date,
        camera_name=camera_name,
        company_id=company_id,
        has_metadata=has_metadata,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats", response_model=EventStats)
def event_stats(db: Session = Depends(get_db)):
    return service.event_stats(db)


@router.get("/recent", response_model=List[EventOut])
def recent_events(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    return service.recent_events(db, limit)


@router.get("/days", response_model=EventDays)
def event_days(
    start_date: datetime = Query(..., description="Start date (ISO format)"),
    end_date: datetime = Query(..., description="End date (ISO format)"),
    db: Session = Depends(get_db),
):
    """Calendar view: days with at least one event"""
    return service.event_days(db, start_date, end_date)


@router.get("/undocumented", response_model=EventPage)
def undocumented_events(
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return service.search_events(db, has_metadata=False, page=page, limit=limit)


@router.get("/grouped")
def grouped_events(
    start_date: datetime = Query(..., description="Start date (ISO format)"),
    end_date: datetime = Query(..., description="End date (ISO format)"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Legacy events in the range grouped into multi-camera vehicle events.

    **Example:** `/api/events/grouped?start_date=2025-10-26T00:00:00Z&end_date=2025-10-26T23:59:59Z`
    """
    return service.grouped_events(db, start_date, end_date, settings.grouping_window)


@router.get("/search/license-plate/{plate}", response_model=EventPage)
def search_by_license_plate(
    plate: str,
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return service.search_events(db, license_plate=plate, page=page, limit=limit)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """
    **Example:** `/api/events/6f1c...`
    """
    return service.get_event(db, event_id)


@router.get("/{event_id}/video", response_model=EventVideo)
def event_video(
    event_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return service.event_video(db, event_id, settings.video_root)


@router.get("/{event_id}/vehicle-event")
def related_vehicle_event(
    event_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Multi-camera group this event belongs to.
    Returns `null` when no other camera saw the plate within the grouping window.
    """
    return service.related_vehicle_event(db, event_id, settings.grouping_window)
