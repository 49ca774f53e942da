"""
vehicle_events package

Multi-camera correlation of ANPR detections:
- lifecycle.py → ACTIVE / COMPLETED / TIMEOUT status model
- grouping.py  → time-window correlation and legacy-row grouping
- adapter.py   → legacy single-camera event → vehicle event conversion

Pure functions only; persistence lives in src/backend/services.
"""

from . import adapter
from . import grouping
from . import lifecycle
