from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from dotenv import load_dotenv
import time
import logging
from workhours.utils.logging import configure_logging
from workhours.utils.ids import request_id as get_request_id
from workhours.config import settings
from workhours.dependencies import current_request_id
from workhours.routes import calculator, data, state, wakatime
from workhours.models import ApiResponse
from workhours.middleware.cors import setup_cors
from workhours.middleware.ratelimit import RateLimitMiddleware
from workhours.middleware.request_size import RequestSizeLimitMiddleware
from workhours.observability.metrics import setup_metrics

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="Work Hours", version="0.1")

setup_metrics(app)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID, log request start and finish, echo the ID back."""

    async def dispatch(self, request: Request, call_next):
        req_id = get_request_id(request.headers.get("x-request-id"))
        request.state.request_id = req_id
        path = request.url.path

        start_time = time.time()
        logger.info(
            f"Request started: {request.method} {path}",
            extra={"request_id": req_id, "path": path},
        )

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {path} status={response.status_code}",
            extra={
                "request_id": req_id,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response


# Added in reverse order of execution
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    capacity=settings.RATE_LIMIT_PER_MINUTE,
    burst=settings.RATE_LIMIT_BURST,
)
app.add_middleware(RequestSizeLimitMiddleware)
setup_cors(app)


@app.get("/healthz")
async def health(request: Request):
    """Basic health check."""
    return ApiResponse.success(data={"status": "healthy"}, request_id=current_request_id(request))


@app.get("/readyz")
async def readiness(request: Request):
    """Readiness: the calculator always works, WakaTime needs a key."""
    checks = {
        "calculator": "ready",
        "wakatime": "configured" if settings.WAKATIME_API_KEY else "missing",
    }
    return ApiResponse.success(
        data={"ready": True, "checks": checks},
        request_id=current_request_id(request),
    )


app.include_router(calculator.router)
app.include_router(data.router)
app.include_router(state.router)
app.include_router(wakatime.router)
