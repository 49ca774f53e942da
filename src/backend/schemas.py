"""
Pydantic models (API schemas)

Response models read straight from ORM objects (``from_attributes``) or
from plain dicts produced by the grouping helpers. The documentation entry
is exposed as ``metadata`` although the ORM relationship is called
``documentation``.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _metadata_field():
    return Field(default=None, validation_alias=AliasChoices("documentation", "metadata"))


# ===========================
# Companies & users
# ===========================

class CompanyBrief(ORMModel):
    id: str
    name: str
    rut: str


class CompanyIn(BaseModel):
    rut: str = Field(..., min_length=3, max_length=12)
    name: str = Field(..., min_length=2, max_length=200)
    active: bool = True


class CompanyUpdate(BaseModel):
    rut: Optional[str] = Field(None, min_length=3, max_length=12)
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    active: Optional[bool] = None


class CompanyOut(ORMModel):
    id: str
    rut: str
    name: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentedEventBrief(BaseModel):
    id: str
    license_plate: str
    event_datetime: datetime
    camera_name: str


class CompanyDetail(CompanyOut):
    recent_events: List[DocumentedEventBrief] = []


class CompanyEventsCount(BaseModel):
    id: str
    name: str
    rut: str
    events_count: int


class CompanyStats(BaseModel):
    total_companies: int
    active_companies: int
    companies_with_events: int
    top_companies_by_events: List[CompanyEventsCount]


class UserIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=200)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    role: str = Field("OPERATOR", pattern="^(ADMINISTRATOR|OPERATOR)$")


class UserOut(ORMModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    active: bool


class ReceptionistBrief(ORMModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None


# ===========================
# Documentation metadata
# ===========================

class MetadataIn(BaseModel):
    company_id: str = Field(..., min_length=1)
    guide_number: str = Field(..., min_length=1, max_length=50)
    guide_date: datetime
    cargo_description: str = Field(..., min_length=10, max_length=500)
    work_order: str = Field(..., min_length=1, max_length=50)
    receptionist_id: str = Field(..., min_length=1)


class MetadataUpdate(BaseModel):
    company_id: Optional[str] = Field(None, min_length=1)
    guide_number: Optional[str] = Field(None, min_length=1, max_length=50)
    guide_date: Optional[datetime] = None
    cargo_description: Optional[str] = Field(None, min_length=10, max_length=500)
    work_order: Optional[str] = Field(None, min_length=1, max_length=50)
    receptionist_id: Optional[str] = Field(None, min_length=1)


class MetadataOut(ORMModel):
    id: str
    event_id: Optional[str] = None
    vehicle_event_id: Optional[str] = None
    company_id: str
    guide_number: str
    guide_date: datetime
    cargo_description: str
    work_order: str
    receptionist_id: str
    company: Optional[CompanyBrief] = None
    receptionist: Optional[ReceptionistBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReceptionistCount(BaseModel):
    id: str
    name: str
    count: int


class MetadataStats(BaseModel):
    total_metadata: int
    metadata_today: int
    companies_with_metadata: int
    top_receptionists: List[ReceptionistCount]


# ===========================
# Shared
# ===========================

class CameraCount(BaseModel):
    name: str
    count: int


# ===========================
# Legacy events
# ===========================

class EventIn(BaseModel):
    license_plate: str = Field(..., min_length=1, max_length=16)
    event_datetime: datetime
    camera_name: str = Field(..., min_length=1, max_length=100)
    video_filename: str = Field(..., min_length=1, max_length=255)
    thumbnail_path: Optional[str] = None
    confidence: float = Field(95.0, ge=0.0, le=100.0)


class EventOut(ORMModel):
    id: str
    license_plate: str
    event_datetime: datetime
    camera_name: str
    video_filename: str
    thumbnail_path: Optional[str] = None
    confidence: float
    has_metadata: bool
    metadata: Optional[MetadataOut] = _metadata_field()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventPage(BaseModel):
    events: List[EventOut]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class EventStats(BaseModel):
    total_events: int
    events_today: int
    events_with_metadata: int
    average_confidence: float
    top_cameras: List[CameraCount]


class EventDay(BaseModel):
    date: str
    count: int


class EventDays(BaseModel):
    days: List[EventDay]


class EventVideo(BaseModel):
    event_id: str
    video_filename: str
    video_path: str
    thumbnail_path: Optional[str] = None
    camera_name: str
    event_datetime: datetime


# ===========================
# Vehicle events
# ===========================

class DetectionIn(BaseModel):
    license_plate: str = Field(..., min_length=1, max_length=16)
    camera_name: str = Field(..., min_length=1, max_length=100)
    timestamp: datetime
    video_path: str = Field(..., min_length=1)
    thumbnail_path: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=100.0)


class DetectionOut(ORMModel):
    id: str
    camera_name: str
    timestamp: datetime
    video_path: str
    thumbnail_path: Optional[str] = None
    confidence: float
    legacy_event_id: Optional[str] = None


class VehicleEventOut(ORMModel):
    id: str
    license_plate: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    has_metadata: bool
    detections: List[DetectionOut] = []
    metadata: Optional[MetadataOut] = _metadata_field()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VehicleEventPage(BaseModel):
    events: List[VehicleEventOut]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class VehicleEventStats(BaseModel):
    total_events: int
    active_events: int
    events_today: int
    events_with_metadata: int
    top_cameras: List[CameraCount]


class TimeoutRequest(BaseModel):
    timeout_minutes: Optional[int] = Field(None, ge=1)


class TimeoutResult(BaseModel):
    events_timed_out: int


class MigrationResult(BaseModel):
    migrated: int


class EventCamera(BaseModel):
    camera_name: str
    timestamp: datetime
    has_video: bool
    has_thumbnail: bool
    detection_id: str


class EventCameras(BaseModel):
    event_id: str
    license_plate: str
    cameras: List[EventCamera]


class DetectionVideo(BaseModel):
    video_path: str
    thumbnail_path: Optional[str] = None
    camera_name: str
    timestamp: datetime
    confidence: float
