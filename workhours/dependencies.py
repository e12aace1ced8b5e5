"""
Shared FastAPI dependencies and error mapping for the routers.
"""
from functools import lru_cache
import logging
from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError
from workhours.config import settings
from workhours.errors import WorkHoursError
from workhours.models import ApiResponse
from workhours.storage import JSONFileStore, StateStore, TTLCache
from workhours.utils.ids import request_id as get_request_id

logger = logging.getLogger(__name__)


def current_request_id(request: Request) -> str:
    """The ID assigned by RequestIDMiddleware, or one derived from the header."""
    req_id = getattr(request.state, "request_id", None)
    return req_id or get_request_id(request.headers.get("x-request-id"))


@lru_cache
def _file_store() -> JSONFileStore:
    return JSONFileStore(settings.STATE_FILE)


def get_store() -> StateStore:
    return _file_store()


def get_cache(store: StateStore = Depends(get_store)) -> TTLCache:
    return TTLCache(store, prefix="wakatime_cache_")


def failure(e: Exception, req_id: str) -> ApiResponse:
    """Map core errors to their code; anything else is an internal error."""
    if isinstance(e, WorkHoursError):
        return ApiResponse.failure(
            code=e.code, message=e.message, details=e.details, request_id=req_id
        )
    if isinstance(e, PydanticValidationError):
        errors = e.errors(include_url=False, include_context=False)
        return ApiResponse.failure(
            code="validation_error",
            message="; ".join(err["msg"] for err in errors),
            details={"errors": errors},
            request_id=req_id,
        )
    logger.error(f"Request {req_id} failed: {e}", exc_info=True)
    return ApiResponse.failure(code="internal_error", message=str(e), request_id=req_id)
