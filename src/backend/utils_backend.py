"""
Backend utility functions
"""
import json
import logging
import math
import os
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC now, the form every datetime is stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert an aware datetime to naive UTC.
    Naive datetimes are assumed to already be UTC.
    """
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[start, end) of a UTC calendar day"""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def today_bounds() -> Tuple[datetime, datetime]:
    return day_bounds(utcnow().date())


def page_envelope(total_count: int, page: int, limit: int) -> Dict:
    """
    Paging fields shared by every search endpoint
    """
    total_pages = math.ceil(total_count / limit) if limit else 0
    return {
        "total_count": total_count,
        "current_page": page,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }


def log_to_fallback(payload: dict, fallback_path: str = "output/logs/fallback.json") -> bool:
    """
    Append a payload that could not be delivered to the backend to a JSON file
    so it can be replayed later.
    """
    try:
        os.makedirs(os.path.dirname(fallback_path), exist_ok=True)

        if os.path.exists(fallback_path):
            with open(fallback_path, 'r') as f:
                logs = json.load(f)
        else:
            logs = []

        if "logged_at" not in payload:
            payload["logged_at"] = utcnow().isoformat()

        logs.append(payload)

        with open(fallback_path, 'w') as f:
            json.dump(logs, f, indent=2, default=str)

        logger.warning("⚠️  Fallback: logged detection for %s", payload.get("license_plate", "UNKNOWN"))
        return True

    except (OSError, ValueError) as e:
        logger.error("❌ Fallback logging failed: %s", e)
        return False


def is_path_safe(requested_path: str, base_path: str) -> bool:
    """
    Check if requested path is within allowed base path
    Prevents directory traversal attacks
    """
    requested_abs = os.path.abspath(requested_path)
    base_abs = os.path.abspath(base_path)
    return os.path.commonpath([requested_abs, base_abs]) == base_abs
