"""
Helper functions for the ANPR camera gateway to push detections to the backend.

Every call returns None (or False) instead of raising when the backend is
unreachable, so a gateway loop never dies because the backend restarted.
Detections that could not be delivered are appended to the fallback log.
"""
import logging
from datetime import datetime
from typing import Dict, Optional

import requests

from .utils_backend import log_to_fallback

logger = logging.getLogger(__name__)

# Backend URL (change if backend is on different host)
BACKEND_URL = "http://localhost:8000"


def check_backend_health() -> bool:
    """
    Check if backend server is running

    Usage:
    ```
    if check_backend_health():
        print("✅ Backend is ready")
    else:
        print("❌ Backend is down")
    ```
    """
    try:
        response = requests.get(f"{BACKEND_URL}/", timeout=2)
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        logger.error("❌ Backend health check failed: %s", e)
        return False


def send_detection_to_backend(
    license_plate: str,
    camera_name: str,
    timestamp: datetime,
    video_path: str,
    thumbnail_path: Optional[str] = None,
    confidence: Optional[float] = None,
) -> Optional[Dict]:
    """
    Send one plate read to the backend for multi-camera correlation

    Parameters:
    - license_plate: Plate as read by the camera
    - camera_name: Camera identifier (e.g., "CAM-GATE-IN")
    - timestamp: When the camera saw the plate
    - video_path: Recording of the sighting
    - thumbnail_path: Snapshot (optional)
    - confidence: Read confidence 0-100 (backend default when omitted)

    Returns:
    - Vehicle event dict from backend or None if failed

    Usage in the gateway:
    ```
    from src.backend.integration_helper import send_detection_to_backend

    event = send_detection_to_backend(
        license_plate="ABCD12",
        camera_name="CAM-GATE-IN",
        timestamp=datetime.now(timezone.utc),
        video_path="videos/gate/20251026_145503.mp4",
        confidence=97.5,
    )

    if event:
        print(f"✅ Vehicle event {event['id']} has {len(event['detections'])} detections")
    ```
    """
    payload = {
        "license_plate": license_plate,
        "camera_name": camera_name,
        "timestamp": timestamp.isoformat(),
        "video_path": video_path,
        "thumbnail_path": thumbnail_path,
        "confidence": confidence,
    }

    try:
        response = requests.post(
            f"{BACKEND_URL}/api/vehicle-events/detections",
            json=payload,
            timeout=10
        )
    except requests.exceptions.Timeout:
        logger.error("❌ Backend request timed out for %s", license_plate)
        log_to_fallback(payload)
        return None
    except requests.exceptions.ConnectionError:
        logger.error("❌ Cannot connect to backend at %s", BACKEND_URL)
        log_to_fallback(payload)
        return None

    if response.status_code in (200, 201):
        logger.info("✅ Detection of %s by %s sent to backend", license_plate, camera_name)
        return response.json()

    logger.error("❌ Backend error %s: %s", response.status_code, response.text)
    log_to_fallback(payload)
    return None


def trigger_timeout(timeout_minutes: Optional[int] = None) -> Optional[int]:
    """
    Ask the backend to time out stale ACTIVE vehicle events now

    Usage:
    ```
    count = trigger_timeout(45)
    if count is not None:
        print(f"{count} events timed out")
    ```
    """
    body = {"timeout_minutes": timeout_minutes} if timeout_minutes else {}
    try:
        response = requests.post(f"{BACKEND_URL}/api/vehicle-events/timeout", json=body, timeout=10)
        if response.status_code == 200:
            return response.json()["events_timed_out"]
        logger.error("❌ Timeout trigger failed: %s", response.status_code)
        return None
    except requests.exceptions.RequestException as e:
        logger.error("❌ Failed to trigger timeout: %s", e)
        return None


def get_vehicle_event_stats() -> Optional[Dict]:
    """
    Get vehicle event statistics from backend

    Returns:
    - Stats dict or None if failed
    """
    try:
        response = requests.get(f"{BACKEND_URL}/api/vehicle-events/stats", timeout=5)
        if response.status_code == 200:
            return response.json()
        return None
    except requests.exceptions.RequestException as e:
        logger.error("❌ Failed to get stats: %s", e)
        return None
