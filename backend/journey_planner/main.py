"""
Journey Planner Backend - FastAPI Application Factory

Builds the app: CORS, request logging, rate limits, the 400 handler for
malformed input, and the journeys, search and directions routers.
Run with: uvicorn journey_planner.main:app --reload
"""

import time
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from journey_planner.api import directions, journeys, search
from journey_planner.config import generate_error_code, log, settings
from journey_planner.limiter import limiter

VERSION = "0.1.0"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it once the response is ready.

    JourneyApiClient sends X-Request-Id on every call; requests without one get
    a fresh id. The id is echoed back so client-side failures can be matched to
    the backend line.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        started = time.perf_counter()
        response = await call_next(request)
        log(
            "INFO",
            f"{request.method} {request.url.path}",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            request_id=request_id,
        )
        response.headers["X-Request-Id"] = request_id
        return response


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query/path/body input is a client error: 400, not FastAPI's 422."""
    log("WARN", "request validation failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": "Invalid request"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = generate_error_code()
    log(
        "ERROR",
        "unhandled error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        error_code=code,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app() -> FastAPI:
    """Build the app. Routers carry their own per-endpoint rate limits."""
    app = FastAPI(
        title="Journey Planner API",
        version=VERSION,
        description="Save and revisit map journeys; place search and route directions proxies.",
    )

    # CORS
    origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID logging
    app.add_middleware(RequestIdMiddleware)

    # slowapi reads the limiter off app.state
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Routers
    app.include_router(journeys.router)
    app.include_router(search.router)
    app.include_router(directions.router)

    return app


app = create_app()


@app.get("/api/health")
async def health_check():
    """
    GET /api/health

    Returns: { "status": "ok", "version": VERSION }
    """
    return {"status": "ok", "version": VERSION}
