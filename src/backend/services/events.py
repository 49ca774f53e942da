"""
Legacy single-camera ANPR events: ingestion, search, dashboard stats
and multi-camera grouping of stored rows.
"""
import logging
import os
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.vehicle_events import grouping

from ..errors import ANPRError, NotFoundError
from ..models import Event, MetadataEntry
from ..schemas import EventIn, EventOut
from ..utils_backend import is_path_safe, page_envelope, to_utc_naive, today_bounds

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "event_datetime": Event.event_datetime,
    "license_plate": Event.license_plate,
}

MAX_DAYS_RANGE = 90


def create_event(db: Session, data: EventIn) -> Event:
    """Store one camera event as reported by the ANPR gateway"""
    event = Event(
        license_plate=grouping.normalize_plate(data.license_plate),
        event_datetime=to_utc_naive(data.event_datetime),
        camera_name=data.camera_name.strip(),
        video_filename=data.video_filename,
        thumbnail_path=data.thumbnail_path,
        confidence=data.confidence,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("✅ Event stored: %s | Camera: %s", event.license_plate, event.camera_name)
    return event


def search_events(
    db: Session,
    license_plate: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    camera_name: Optional[str] = None,
    company_id: Optional[str] = None,
    has_metadata: Optional[bool] = None,
    page: int = 1,
    limit: int = 25,
    sort_by: str = "event_datetime",
    sort_order: str = "desc",
) -> Dict[str, Any]:
    """
    Apply dashboard filters and return one page of events.

    **Examples:**
    - Undocumented only: `has_metadata=False`
    - One carrier: `company_id=<id>`
    - Plate fragment: `license_plate="bc12"` (case-insensitive)
    """
    query = db.query(Event)

    if license_plate:
        plate = grouping.normalize_plate(license_plate)
        query = query.filter(Event.license_plate.contains(plate, autoescape=True))

    if start_date:
        query = query.filter(Event.event_datetime >= to_utc_naive(start_date))

    if end_date:
        query = query.filter(Event.event_datetime <= to_utc_naive(end_date))

    if camera_name:
        query = query.filter(Event.camera_name.icontains(camera_name, autoescape=True))

    if company_id:
        query = query.join(MetadataEntry, MetadataEntry.event_id == Event.id).filter(
            MetadataEntry.company_id == company_id
        )

    if has_metadata is not None:
        query = query.filter(Event.has_metadata == has_metadata)

    column = SORTABLE_FIELDS.get(sort_by, Event.event_datetime)
    order = column.asc() if sort_order == "asc" else column.desc()

    total_count = query.count()
    events = query.order_by(order).offset((page - 1) * limit).limit(limit).all()

    logger.debug("Fetched %d/%d events (page %d)", len(events), total_count, page)
    return {"events": events, **page_envelope(total_count, page, limit)}


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def recent_events(db: Session, limit: int = 10) -> List[Event]:
    return db.query(Event).order_by(Event.event_datetime.desc()).limit(limit).all()


def event_stats(db: Session) -> Dict[str, Any]:
    start, end = today_bounds()

    total = db.query(func.count(Event.id)).scalar()
    today = (
        db.query(func.count(Event.id))
        .filter(Event.event_datetime >= start, Event.event_datetime < end)
        .scalar()
    )
    documented = db.query(func.count(Event.id)).filter(Event.has_metadata == True).scalar()  # noqa: E712
    avg_confidence = db.query(func.avg(Event.confidence)).scalar() or 0.0

    camera_count = func.count(Event.id)
    top_cameras = (
        db.query(Event.camera_name, camera_count)
        .group_by(Event.camera_name)
        .order_by(camera_count.desc(), Event.camera_name.asc())
        .limit(5)
        .all()
    )

    return {
        "total_events": total,
        "events_today": today,
        "events_with_metadata": documented,
        "average_confidence": round(float(avg_confidence), 1),
        "top_cameras": [{"name": name, "count": count} for name, count in top_cameras],
    }


def event_days(db: Session, start_date: datetime, end_date: datetime) -> Dict[str, List[Dict]]:
    """Days (YYYY-MM-DD) inside the range that have at least one event"""
    start_date, end_date = to_utc_naive(start_date), to_utc_naive(end_date)
    if start_date > end_date:
        raise ANPRError("start_date must not be after end_date")
    if end_date - start_date > timedelta(days=MAX_DAYS_RANGE):
        raise ANPRError(f"Date range is limited to {MAX_DAYS_RANGE} days")

    moments = (
        db.query(Event.event_datetime)
        .filter(Event.event_datetime >= start_date, Event.event_datetime <= end_date)
        .all()
    )

    per_day = Counter(moment.date().isoformat() for (moment,) in moments)
    return {"days": [{"date": day, "count": per_day[day]} for day in sorted(per_day)]}


def event_video(db: Session, event_id: str, video_root: str) -> Dict[str, Any]:
    event = get_event(db, event_id)
    video_path = os.path.join(video_root, event.video_filename)

    if not is_path_safe(video_path, video_root):
        raise ANPRError(f"Video filename of event {event_id} points outside the video folder")

    return {
        "event_id": event.id,
        "video_filename": event.video_filename,
        "video_path": video_path,
        "thumbnail_path": event.thumbnail_path,
        "camera_name": event.camera_name,
        "event_datetime": event.event_datetime,
    }


###########################
# Multi-camera grouping   #
###########################

def event_to_dict(event: Event) -> Dict[str, Any]:
    return EventOut.model_validate(event).model_dump()


def grouped_events(
    db: Session,
    start_date: datetime,
    end_date: datetime,
    window: timedelta = grouping.DEFAULT_GROUPING_WINDOW,
) -> List[Dict[str, Any]]:
    """Legacy rows in the range, grouped into multi-camera vehicle events"""
    rows = (
        db.query(Event)
        .filter(
            Event.event_datetime >= to_utc_naive(start_date),
            Event.event_datetime <= to_utc_naive(end_date),
        )
        .order_by(Event.event_datetime.asc())
        .all()
    )
    return grouping.group_legacy_events([event_to_dict(e) for e in rows], window)


def related_vehicle_event(
    db: Session,
    event_id: str,
    window: timedelta = grouping.DEFAULT_GROUPING_WINDOW,
) -> Optional[Dict[str, Any]]:
    """Vehicle event formed by this event and other sightings of its plate"""
    event = get_event(db, event_id)
    neighbours = (
        db.query(Event)
        .filter(
            Event.license_plate == event.license_plate,
            Event.event_datetime >= event.event_datetime - window,
            Event.event_datetime <= event.event_datetime + window,
        )
        .order_by(Event.event_datetime.asc())
        .all()
    )

    return grouping.related_vehicle_event(
        [event_to_dict(e) for e in neighbours], event_to_dict(event), window
    )
