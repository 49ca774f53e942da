"""
ORM models for ANPR events, multi-camera vehicle events and their documentation.

Tables:
- companies        → carriers / suppliers that documented cargo belongs to
- users            → receptionists who document events
- events           → legacy single-camera ANPR events
- vehicle_events   → one logical vehicle visit spanning several cameras
- detections       → one camera sighting inside a vehicle event
- metadata_entries → shipping documentation attached to an event

The relationship to a documentation entry is called ``documentation`` because
``metadata`` is reserved by SQLAlchemy's declarative base.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.vehicle_events import lifecycle

from .database import Base
from .utils_backend import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    rut: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), index=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    entries: Mapped[List["MetadataEntry"]] = relationship(back_populates="company")

    def __repr__(self):
        return f"<Company {self.rut} {self.name}>"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="OPERATOR", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_plate: Mapped[str] = mapped_column(String(16), index=True, nullable=False)
    event_datetime: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
    camera_name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    video_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    thumbnail_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    confidence: Mapped[float] = mapped_column(Float, default=95.0, nullable=False)
    has_metadata: Mapped[bool] = mapped_column(Boolean, default=False, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    documentation: Mapped[Optional["MetadataEntry"]] = relationship(
        back_populates="event", uselist=False, foreign_keys="MetadataEntry.event_id"
    )

    def __repr__(self):
        return f"<Event {self.id} plate={self.license_plate} cam={self.camera_name}>"


class VehicleEvent(Base):
    __tablename__ = "vehicle_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    license_plate: Mapped[str] = mapped_column(String(16), index=True, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(16), index=True, default=lifecycle.ACTIVE, nullable=False)
    has_metadata: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    detections: Mapped[List["Detection"]] = relationship(
        back_populates="vehicle_event",
        order_by="Detection.timestamp",
        cascade="all, delete-orphan",
    )
    documentation: Mapped[Optional["MetadataEntry"]] = relationship(
        back_populates="vehicle_event", uselist=False, foreign_keys="MetadataEntry.vehicle_event_id"
    )

    def __repr__(self):
        return f"<VehicleEvent {self.id} plate={self.license_plate} status={self.status}>"


class Detection(Base):
    __tablename__ = "detections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    vehicle_event_id: Mapped[str] = mapped_column(ForeignKey("vehicle_events.id"), index=True, nullable=False)
    camera_name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    video_path: Mapped[str] = mapped_column(String(255), nullable=False)
    thumbnail_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    confidence: Mapped[float] = mapped_column(Float, default=95.0, nullable=False)
    legacy_event_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("events.id"), unique=True, nullable=True
    )

    vehicle_event: Mapped[VehicleEvent] = relationship(back_populates="detections")


class MetadataEntry(Base):
    __tablename__ = "metadata_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    event_id: Mapped[Optional[str]] = mapped_column(ForeignKey("events.id"), unique=True, nullable=True)
    vehicle_event_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("vehicle_events.id"), unique=True, nullable=True
    )
    company_id: Mapped[str] = mapped_column(ForeignKey("companies.id"), index=True, nullable=False)
    guide_number: Mapped[str] = mapped_column(String(50), nullable=False)
    guide_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    cargo_description: Mapped[str] = mapped_column(Text, nullable=False)
    work_order: Mapped[str] = mapped_column(String(50), nullable=False)
    receptionist_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    company: Mapped[Company] = relationship(back_populates="entries")
    receptionist: Mapped[User] = relationship()
    event: Mapped[Optional[Event]] = relationship(back_populates="documentation", foreign_keys=[event_id])
    vehicle_event: Mapped[Optional[VehicleEvent]] = relationship(
        back_populates="documentation", foreign_keys=[vehicle_event_id]
    )
