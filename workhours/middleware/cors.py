"""
CORS setup from settings.
"""
from fastapi.middleware.cors import CORSMiddleware
from workhours.config import settings
import logging

logger = logging.getLogger(__name__)

DEV_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


def setup_cors(app) -> list[str]:
    """
    Allow the origins listed in CORS_ORIGINS (comma-separated).
    Falls back to the local dev servers when the setting is empty.
    """
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    if not origins:
        origins = DEV_ORIGINS
        logger.info(f"CORS_ORIGINS not set, using defaults: {origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "X-WakaTime-Key"],
    )
    return origins
