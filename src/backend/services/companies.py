"""
Companies: carriers / suppliers referenced by documentation entries
"""
import logging
from typing import Dict, List

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models import Company, Event, MetadataEntry
from ..schemas import CompanyIn, CompanyUpdate

logger = logging.getLogger(__name__)

RECENT_EVENTS_LIMIT = 10


def list_active_companies(db: Session) -> List[Company]:
    """Active companies for dropdowns, sorted by name"""
    companies = (
        db.query(Company)
        .filter(Company.active == True)  # noqa: E712
        .order_by(Company.name.asc())
        .all()
    )
    logger.debug("Found %d active companies", len(companies))
    return companies


def get_company(db: Session, company_id: str) -> Company:
    company = db.get(Company, company_id)
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    return company


def get_company_detail(db: Session, company_id: str) -> Dict:
    """Company plus the last documented legacy events it appears in"""
    company = get_company(db, company_id)

    rows = (
        db.query(Event)
        .join(MetadataEntry, MetadataEntry.event_id == Event.id)
        .filter(MetadataEntry.company_id == company_id)
        .order_by(MetadataEntry.created_at.desc())
        .limit(RECENT_EVENTS_LIMIT)
        .all()
    )

    return {
        "id": company.id,
        "rut": company.rut,
        "name": company.name,
        "active": company.active,
        "created_at": company.created_at,
        "updated_at": company.updated_at,
        "recent_events": [
            {
                "id": ev.id,
                "license_plate": ev.license_plate,
                "event_datetime": ev.event_datetime,
                "camera_name": ev.camera_name,
            }
            for ev in rows
        ],
    }


def _ensure_rut_free(db: Session, rut: str):
    if db.query(Company).filter(Company.rut == rut).first() is not None:
        raise ConflictError(f"A company with RUT {rut} already exists")


def create_company(db: Session, data: CompanyIn) -> Company:
    rut = data.rut.strip().upper()
    _ensure_rut_free(db, rut)

    company = Company(rut=rut, name=data.name.strip(), active=data.active)
    db.add(company)
    db.commit()
    db.refresh(company)

    logger.info("✅ Company created: %s (%s)", company.name, company.rut)
    return company


def update_company(db: Session, company_id: str, data: CompanyUpdate) -> Company:
    company = get_company(db, company_id)
    changes = data.model_dump(exclude_unset=True)

    if "rut" in changes and changes["rut"] is not None:
        changes["rut"] = changes["rut"].strip().upper()
        if changes["rut"] != company.rut:
            _ensure_rut_free(db, changes["rut"])

    for field, value in changes.items():
        if value is not None:
            setattr(company, field, value)

    db.commit()
    db.refresh(company)
    logger.info("Company %s updated: %s", company_id, sorted(changes))
    return company


def deactivate_company(db: Session, company_id: str) -> Company:
    """Soft delete so documentation entries keep their company"""
    company = get_company(db, company_id)
    company.active = False
    db.commit()
    db.refresh(company)
    logger.info("Company %s deactivated", company_id)
    return company


def search_companies(db: Session, query: str) -> List[Company]:
    """Active companies whose name or RUT contains `query`"""
    fragment = query.strip()
    return (
        db.query(Company)
        .filter(Company.active == True)  # noqa: E712
        .filter(
            or_(
                Company.name.icontains(fragment, autoescape=True),
                Company.rut.icontains(fragment, autoescape=True),
            )
        )
        .order_by(Company.name.asc())
        .all()
    )


def company_stats(db: Session) -> Dict:
    total = db.query(func.count(Company.id)).scalar()
    active = db.query(func.count(Company.id)).filter(Company.active == True).scalar()  # noqa: E712
    with_events = db.query(func.count(func.distinct(MetadataEntry.company_id))).scalar()

    entries_count = func.count(MetadataEntry.id)
    top = (
        db.query(Company, entries_count.label("events_count"))
        .outerjoin(MetadataEntry, MetadataEntry.company_id == Company.id)
        .filter(Company.active == True)  # noqa: E712
        .group_by(Company.id)
        .order_by(entries_count.desc(), Company.name.asc())
        .limit(5)
        .all()
    )

    return {
        "total_companies": total,
        "active_companies": active,
        "companies_with_events": with_events,
        "top_companies_by_events": [
            {"id": c.id, "name": c.name, "rut": c.rut, "events_count": count}
            for c, count in top
        ],
    }
