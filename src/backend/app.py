import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .errors import register_error_handlers
from .routes import companies, events, metadata, users, vehicle_events
from . import sweeper

# ===========================
# Load Settings
# ===========================
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version
)

# CORS with settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(vehicle_events.router)
app.include_router(events.router)
app.include_router(metadata.router)
app.include_router(companies.router)
app.include_router(users.router)


# ===========================
# Lifecycle
# ===========================

@app.on_event("startup")
def startup_event():
    """Create tables and start the timeout sweeper"""
    logger.info("🚀 Starting %s...", settings.api_title)
    logger.info("📁 Video root: %s", settings.get_absolute_path(settings.video_root))
    logger.info("🌐 CORS allowed origins: %s", settings.allowed_origins_list)

    os.makedirs(settings.video_root, exist_ok=True)
    init_db()

    if settings.enable_timeout_sweeper:
        sweeper.start_timeout_sweeper(
            settings.timeout_sweep_interval_seconds,
            settings.timeout_minutes,
        )


@app.on_event("shutdown")
def shutdown_event():
    sweeper.stop_timeout_sweeper()


@app.get("/")
def healthcheck():
    """Health check"""
    return {
        "status": "ok",
        "service": settings.api_title,
        "version": settings.api_version,
        "timeout_sweeper": sweeper.is_running(),
        "cors_origins": settings.allowed_origins_list
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.backend.app:app", host=settings.host, port=settings.port, reload=False)
