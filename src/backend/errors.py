"""
Domain errors raised by the services and their HTTP mapping
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ANPRError(Exception):
    """Base error for the ANPR backend"""
    status_code = 400


class NotFoundError(ANPRError):
    """Requested record does not exist"""
    status_code = 404


class ConflictError(ANPRError):
    """Record already exists or is already documented"""
    status_code = 409


class InvalidTransitionError(ANPRError):
    """Vehicle event status change not allowed"""
    status_code = 409


def register_error_handlers(app: FastAPI):
    """Turn domain errors into JSON responses"""

    @app.exception_handler(ANPRError)
    async def handle_anpr_error(request: Request, exc: ANPRError):
        if exc.status_code >= 500:
            logger.error("Error on %s %s: %s", request.method, request.url.path, exc)
        else:
            logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})
