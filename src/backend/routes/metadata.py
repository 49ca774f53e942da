"""
Documentation (metadata) endpoints for legacy events
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import MetadataIn, MetadataOut, MetadataStats, MetadataUpdate
from ..services import metadata as service

router = APIRouter(prefix="/api/metadata", tags=["metadata"])


@router.get("/stats", response_model=MetadataStats)
def metadata_stats(db: Session = Depends(get_db)):
    return service.metadata_stats(db)


@router.post("/events/{event_id}/metadata", response_model=MetadataOut, status_code=201)
def create_metadata(event_id: str, entry: MetadataIn, db: Session = Depends(get_db)):
    """
    Document a legacy event. Answers 409 if it is already documented.

    **Example:**
    ```
    {
        "company_id": "<company id>",
        "guide_number": "GD-100234",
        "guide_date": "2025-10-26T00:00:00Z",
        "cargo_description": "12 pallets of cement bags",
        "work_order": "OT-5521",
        "receptionist_id": "<user id>"
    }
    ```
    """
    return service.create_metadata(db, event_id, entry)


@router.get("/events/{event_id}/metadata", response_model=MetadataOut)
def get_metadata(event_id: str, db: Session = Depends(get_db)):
    return service.get_metadata(db, event_id)


@router.put("/events/{event_id}/metadata", response_model=MetadataOut)
def update_metadata(event_id: str, changes: MetadataUpdate, db: Session = Depends(get_db)):
    return service.update_metadata(db, event_id, changes)


@router.delete("/events/{event_id}/metadata")
def delete_metadata(event_id: str, db: Session = Depends(get_db)):
    return service.delete_metadata(db, event_id)
