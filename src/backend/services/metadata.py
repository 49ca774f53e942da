"""
Shipping documentation (company, guide, cargo, work order) attached to
legacy events and to vehicle events.

Creating or deleting an entry and flipping the owner's ``has_metadata``
flag always happen in the same commit.
"""
import logging
from typing import Dict, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ANPRError, ConflictError, NotFoundError
from ..models import Company, Event, MetadataEntry, User, VehicleEvent
from ..schemas import MetadataIn, MetadataUpdate
from ..utils_backend import to_utc_naive, today_bounds

logger = logging.getLogger(__name__)

Documentable = Union[Event, VehicleEvent]


def _require_company(db: Session, company_id: str) -> Company:
    company = db.get(Company, company_id)
    if company is None:
        raise ANPRError(f"Company {company_id} not found")
    return company


def _require_receptionist(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ANPRError(f"Receptionist {user_id} not found")
    return user


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _document(db: Session, owner: Documentable, data: MetadataIn) -> MetadataEntry:
    if owner.documentation is not None:
        raise ConflictError(f"{type(owner).__name__} {owner.id} is already documented")

    _require_company(db, data.company_id)
    _require_receptionist(db, data.receptionist_id)

    entry = MetadataEntry(
        company_id=data.company_id,
        guide_number=data.guide_number.strip(),
        guide_date=to_utc_naive(data.guide_date),
        cargo_description=data.cargo_description.strip(),
        work_order=data.work_order.strip(),
        receptionist_id=data.receptionist_id,
    )
    db.add(entry)
    owner.documentation = entry
    owner.has_metadata = True
    _commit(db)
    db.refresh(entry)

    logger.info("✅ %s %s documented (guide %s)", type(owner).__name__, owner.id, entry.guide_number)
    return entry


def create_metadata(db: Session, event_id: str, data: MetadataIn) -> MetadataEntry:
    """Document a legacy event"""
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return _document(db, event, data)


def create_vehicle_event_metadata(db: Session, vehicle_event_id: str, data: MetadataIn) -> MetadataEntry:
    """Document a multi-camera vehicle event"""
    vehicle_event = db.get(VehicleEvent, vehicle_event_id)
    if vehicle_event is None:
        raise NotFoundError(f"Vehicle event {vehicle_event_id} not found")
    return _document(db, vehicle_event, data)


def get_metadata(db: Session, event_id: str) -> MetadataEntry:
    entry = db.query(MetadataEntry).filter(MetadataEntry.event_id == event_id).first()
    if entry is None:
        raise NotFoundError(f"No metadata for event {event_id}")
    return entry


def update_metadata(db: Session, event_id: str, data: MetadataUpdate) -> MetadataEntry:
    entry = get_metadata(db, event_id)
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "company_id" in changes and changes["company_id"] != entry.company_id:
        _require_company(db, changes["company_id"])
    if "receptionist_id" in changes:
        _require_receptionist(db, changes["receptionist_id"])
    if "guide_date" in changes:
        changes["guide_date"] = to_utc_naive(changes["guide_date"])

    for field, value in changes.items():
        setattr(entry, field, value)

    _commit(db)
    db.refresh(entry)
    logger.info("Metadata of event %s updated: %s", event_id, sorted(changes))
    return entry


def delete_metadata(db: Session, event_id: str) -> Dict:
    """Remove the entry and mark the event undocumented again"""
    entry = get_metadata(db, event_id)
    event = entry.event

    event.documentation = None
    if entry.vehicle_event is None:
        db.delete(entry)
    event.has_metadata = False
    _commit(db)

    logger.info("🗑️  Metadata of event %s deleted", event_id)
    return {"event_id": event_id, "deleted": True}


def metadata_stats(db: Session) -> Dict:
    start, end = today_bounds()

    total = db.query(func.count(MetadataEntry.id)).scalar()
    today = (
        db.query(func.count(MetadataEntry.id))
        .filter(MetadataEntry.created_at >= start, MetadataEntry.created_at < end)
        .scalar()
    )
    companies = db.query(func.count(func.distinct(MetadataEntry.company_id))).scalar()

    entry_count = func.count(MetadataEntry.id)
    top = (
        db.query(MetadataEntry.receptionist_id, entry_count)
        .group_by(MetadataEntry.receptionist_id)
        .order_by(entry_count.desc())
        .limit(5)
        .all()
    )

    names = {
        user.id: user.full_name
        for user in db.query(User).filter(User.id.in_([rid for rid, _ in top])).all()
    }

    return {
        "total_metadata": total,
        "metadata_today": today,
        "companies_with_metadata": companies,
        "top_receptionists": [
            {"id": rid, "name": names.get(rid, "Unknown user"), "count": count}
            for rid, count in top
        ],
    }
