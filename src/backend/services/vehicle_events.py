"""
Multi-camera vehicle events: live correlation of camera detections,
lifecycle (ACTIVE -> COMPLETED / TIMEOUT) and migration of legacy rows.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.vehicle_events import grouping, lifecycle
from src.vehicle_events.adapter import VIDEO_PREFIX

from ..errors import InvalidTransitionError, NotFoundError
from ..models import Detection, Event, VehicleEvent
from ..schemas import DetectionIn
from ..utils_backend import page_envelope, to_utc_naive, today_bounds, utcnow

logger = logging.getLogger(__name__)


def _find_active_event(db: Session, plate: str, timestamp: datetime, window: timedelta) -> Optional[VehicleEvent]:
    return (
        db.query(VehicleEvent)
        .filter(
            VehicleEvent.license_plate == plate,
            VehicleEvent.status == lifecycle.ACTIVE,
            VehicleEvent.start_time >= grouping.correlation_cutoff(timestamp, window),
        )
        .order_by(VehicleEvent.start_time.desc())
        .first()
    )


def process_detection(
    db: Session,
    data: DetectionIn,
    correlation_window: timedelta = grouping.DEFAULT_CORRELATION_WINDOW,
    default_confidence: float = 95.0,
) -> VehicleEvent:
    """
    Attach a camera detection to the plate's ACTIVE vehicle event, or open a
    new one when no event of that plate started inside the correlation window.

    **Example:**
    ```
    CAM-GATE   09:00  ABCD12  -> new ACTIVE event (start=end=09:00)
    CAM-SCALE  09:20  ABCD12  -> same event, end=09:20, 2 detections
    CAM-GATE   12:30  ABCD12  -> new event (first one started > 2h earlier)
    ```
    """
    plate = grouping.normalize_plate(data.license_plate)
    timestamp = to_utc_naive(data.timestamp)
    confidence = data.confidence if data.confidence is not None else default_confidence

    vehicle_event = _find_active_event(db, plate, timestamp, correlation_window)

    if vehicle_event is None:
        vehicle_event = VehicleEvent(
            license_plate=plate,
            start_time=timestamp,
            end_time=timestamp,
            status=lifecycle.ACTIVE,
        )
        db.add(vehicle_event)
        logger.info("🚗 New vehicle event for %s at %s (%s)", plate, timestamp, data.camera_name)
    else:
        vehicle_event.start_time, vehicle_event.end_time = grouping.extend_time_span(
            vehicle_event.start_time, vehicle_event.end_time, timestamp
        )
        logger.info("Detection of %s by %s joined vehicle event %s", plate, data.camera_name, vehicle_event.id)

    vehicle_event.detections.append(
        Detection(
            camera_name=data.camera_name.strip(),
            timestamp=timestamp,
            video_path=data.video_path,
            thumbnail_path=data.thumbnail_path,
            confidence=confidence,
        )
    )

    db.commit()
    db.refresh(vehicle_event)
    return vehicle_event


def search_vehicle_events(
    db: Session,
    license_plate: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    status: Optional[str] = None,
    has_metadata: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    query = db.query(VehicleEvent)

    if license_plate:
        plate = grouping.normalize_plate(license_plate)
        query = query.filter(VehicleEvent.license_plate.contains(plate, autoescape=True))
    if start_date:
        query = query.filter(VehicleEvent.start_time >= to_utc_naive(start_date))
    if end_date:
        query = query.filter(VehicleEvent.start_time <= to_utc_naive(end_date))
    if status:
        query = query.filter(VehicleEvent.status == status)
    if has_metadata is not None:
        query = query.filter(VehicleEvent.has_metadata == has_metadata)

    total_count = query.count()
    events = (
        query.order_by(VehicleEvent.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"events": events, **page_envelope(total_count, page, limit)}


def get_vehicle_event(db: Session, vehicle_event_id: str) -> VehicleEvent:
    vehicle_event = db.get(VehicleEvent, vehicle_event_id)
    if vehicle_event is None:
        raise NotFoundError(f"Vehicle event {vehicle_event_id} not found")
    return vehicle_event


def complete_vehicle_event(db: Session, vehicle_event_id: str) -> VehicleEvent:
    """Close an ACTIVE event by hand, e.g. when the truck leaves the yard"""
    vehicle_event = get_vehicle_event(db, vehicle_event_id)

    if not lifecycle.can_transition(vehicle_event.status, lifecycle.COMPLETED):
        raise InvalidTransitionError(
            f"Vehicle event {vehicle_event_id} is {vehicle_event.status} and cannot be completed"
        )

    vehicle_event.status = lifecycle.COMPLETED
    vehicle_event.end_time = max(utcnow(), vehicle_event.end_time or vehicle_event.start_time)
    db.commit()
    db.refresh(vehicle_event)

    logger.info("✅ Vehicle event %s completed", vehicle_event_id)
    return vehicle_event


def timeout_inactive_events(db: Session, timeout_minutes: int = 30) -> int:
    """Mark ACTIVE events not seen for `timeout_minutes` as TIMEOUT"""
    cutoff = lifecycle.timeout_cutoff(utcnow(), timeout_minutes)

    count = (
        db.query(VehicleEvent)
        .filter(VehicleEvent.status == lifecycle.ACTIVE, VehicleEvent.end_time < cutoff)
        .update({VehicleEvent.status: lifecycle.TIMEOUT}, synchronize_session="fetch")
    )
    db.commit()

    if count:
        logger.info("⏱️  %d vehicle event(s) timed out (inactive > %d min)", count, timeout_minutes)
    return count


def vehicle_event_stats(db: Session) -> Dict[str, Any]:
    start, end = today_bounds()

    total = db.query(func.count(VehicleEvent.id)).scalar()
    active = (
        db.query(func.count(VehicleEvent.id))
        .filter(VehicleEvent.status == lifecycle.ACTIVE)
        .scalar()
    )
    today = (
        db.query(func.count(VehicleEvent.id))
        .filter(VehicleEvent.start_time >= start, VehicleEvent.start_time < end)
        .scalar()
    )
    documented = db.query(func.count(VehicleEvent.id)).filter(VehicleEvent.has_metadata == True).scalar()  # noqa: E712

    detection_count = func.count(Detection.id)
    top_cameras = (
        db.query(Detection.camera_name, detection_count)
        .group_by(Detection.camera_name)
        .order_by(detection_count.desc(), Detection.camera_name.asc())
        .limit(5)
        .all()
    )

    return {
        "total_events": total,
        "active_events": active,
        "events_today": today,
        "events_with_metadata": documented,
        "top_cameras": [{"name": name, "count": count} for name, count in top_cameras],
    }


###########################
# Legacy migration        #
###########################

def migrate_legacy_event(
    db: Session,
    legacy_id: str,
    window: timedelta = grouping.DEFAULT_MIGRATION_WINDOW,
) -> VehicleEvent:
    """
    Turn one legacy single-camera row into a detection of a vehicle event.

    The row joins a vehicle event of the same plate that started within
    +/- `window` of it; otherwise a COMPLETED vehicle event is created at
    the row's instant. Running it twice for the same row is a no-op.
    """
    legacy = db.get(Event, legacy_id)
    if legacy is None:
        raise NotFoundError(f"Event {legacy_id} not found")

    existing = db.query(Detection).filter(Detection.legacy_event_id == legacy.id).first()
    if existing is not None:
        logger.debug("Event %s already migrated into %s", legacy.id, existing.vehicle_event_id)
        return existing.vehicle_event

    lower, upper = grouping.migration_bounds(legacy.event_datetime, window)
    vehicle_event = (
        db.query(VehicleEvent)
        .filter(
            VehicleEvent.license_plate == legacy.license_plate,
            VehicleEvent.start_time >= lower,
            VehicleEvent.start_time <= upper,
        )
        .order_by(VehicleEvent.start_time.asc())
        .first()
    )

    if vehicle_event is None:
        vehicle_event = VehicleEvent(
            license_plate=legacy.license_plate,
            start_time=legacy.event_datetime,
            end_time=legacy.event_datetime,
            status=lifecycle.COMPLETED,
            has_metadata=legacy.has_metadata,
        )
        db.add(vehicle_event)
    else:
        vehicle_event.start_time, vehicle_event.end_time = grouping.extend_time_span(
            vehicle_event.start_time, vehicle_event.end_time, legacy.event_datetime
        )

    vehicle_event.detections.append(
        Detection(
            camera_name=legacy.camera_name,
            timestamp=legacy.event_datetime,
            video_path=f"{VIDEO_PREFIX}/{legacy.video_filename}",
            thumbnail_path=legacy.thumbnail_path,
            confidence=legacy.confidence,
            legacy_event_id=legacy.id,
        )
    )

    entry = legacy.documentation
    if entry is not None and vehicle_event.documentation is None and entry.vehicle_event_id is None:
        vehicle_event.documentation = entry
        vehicle_event.has_metadata = True

    db.commit()
    db.refresh(vehicle_event)

    logger.info("Migrated event %s (%s) into vehicle event %s", legacy.id, legacy.license_plate, vehicle_event.id)
    return vehicle_event


def migrate_all_legacy_events(
    db: Session,
    window: timedelta = grouping.DEFAULT_MIGRATION_WINDOW,
) -> int:
    """Migrate every legacy row without a detection, oldest first"""
    migrated_ids = select(Detection.legacy_event_id).where(Detection.legacy_event_id.isnot(None))
    pending = (
        db.query(Event.id)
        .filter(Event.id.notin_(migrated_ids))
        .order_by(Event.event_datetime.asc())
        .all()
    )

    for (legacy_id,) in pending:
        migrate_legacy_event(db, legacy_id, window)

    logger.info("✅ Legacy migration finished: %d event(s) migrated", len(pending))
    return len(pending)


###########################
# Cameras & videos        #
###########################

def event_cameras(db: Session, vehicle_event_id: str) -> Dict[str, Any]:
    vehicle_event = get_vehicle_event(db, vehicle_event_id)
    return {
        "event_id": vehicle_event.id,
        "license_plate": vehicle_event.license_plate,
        "cameras": [
            {
                "camera_name": d.camera_name,
                "timestamp": d.timestamp,
                "has_video": bool(d.video_path),
                "has_thumbnail": bool(d.thumbnail_path),
                "detection_id": d.id,
            }
            for d in vehicle_event.detections
        ],
    }


def detection_video(db: Session, vehicle_event_id: str, detection_id: str) -> Dict[str, Any]:
    vehicle_event = get_vehicle_event(db, vehicle_event_id)
    detection = next((d for d in vehicle_event.detections if d.id == detection_id), None)
    if detection is None:
        raise NotFoundError(f"Detection {detection_id} not found in vehicle event {vehicle_event_id}")

    return {
        "video_path": detection.video_path,
        "thumbnail_path": detection.thumbnail_path,
        "camera_name": detection.camera_name,
        "timestamp": detection.timestamp,
        "confidence": detection.confidence,
    }
