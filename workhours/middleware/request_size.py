"""
Reject oversized request bodies (CSV uploads are the usual culprit).
"""
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from workhours.config import settings
import logging

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Checks Content-Length before the body is read."""

    def __init__(self, app, max_size_bytes: Optional[int] = None):
        super().__init__(app)
        self.max_size_bytes = (
            max_size_bytes
            if max_size_bytes is not None
            else settings.MAX_REQUEST_SIZE_MB * 1024 * 1024
        )

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_size_bytes:
            logger.warning(
                f"Rejected {request.url.path}: {declared} bytes exceeds {self.max_size_bytes}"
            )
            limit_mb = self.max_size_bytes / (1024 * 1024)
            return JSONResponse(
                status_code=413,
                content={
                    "ok": False,
                    "error": {
                        "code": "payload_too_large",
                        "message": f"Request body too large. Maximum size is {limit_mb:.1f}MB",
                    },
                },
            )

        return await call_next(request)
