"""
backend package

FastAPI-based REST API for ANPR camera event logging and documentation.

Provides:
- POST /api/vehicle-events/detections → Correlate a camera detection into a vehicle event
- GET /api/vehicle-events → Search multi-camera vehicle events
- PUT /api/vehicle-events/{id}/complete → Close a vehicle event
- POST /api/vehicle-events/timeout → Time out stale ACTIVE events
- POST /api/vehicle-events/migrate → Move legacy events into vehicle events
- /api/events → Legacy single-camera events, stats, calendar days, grouping
- /api/metadata → Shipping documentation of events
- /api/companies, /api/users → Reference data for documentation
"""

from .app import app
from .config import get_settings

__all__ = ["app", "get_settings"]

__version__ = "1.0.0"
