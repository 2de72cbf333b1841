"""
api/main.py -- FastAPI application for JobTrack.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Request path (outermost first):
  1. CORSMiddleware     -- browser origins from CORS_ORIGINS
  2. SlowAPIMiddleware  -- per-route limits declared with @limiter.limit
  3. log_requests       -- one access-log line per request
  4. routers under /api/v1 (auth, users, job applications) + /health

Startup builds the token signer, both stores and the upload directory from
Settings and parks them on app.state; route handlers read them from there.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.job_applications import router as job_applications_router
from api.routes.v1.users import router as users_router
from applications.store import ApplicationStore
from auth.store import UserStore
from auth.tokens import TokenSigner
from core.config import get_settings
from uploads.store import UploadStore

API_VERSION = "1.0.0"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("jobtrack.api")
access_logger = logging.getLogger("jobtrack.access")

# Loaded at import: a missing SECRET_KEY stops the process before uvicorn
# binds a port.
_settings = get_settings()


# ---------------------------------------------------------------------------
# Startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("JobTrack API %s starting", API_VERSION)
    app.state.token_signer = TokenSigner(
        secret_key=_settings.secret_key,
        expire_minutes=_settings.token_expire_minutes,
    )
    app.state.user_store = UserStore(_settings.database_url)
    app.state.applications = ApplicationStore(_settings.database_url)
    app.state.uploads = UploadStore(_settings.upload_dir)
    logger.info("Stores ready; uploads under %s", app.state.uploads.root)

    yield

    app.state.applications.close()
    app.state.user_store.close()
    logger.info("JobTrack API stopped")


app = FastAPI(
    title="JobTrack API",
    description="Job application tracking: accounts, applications, documents.",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)
app.add_middleware(SlowAPIMiddleware)
app.state.limiter = limiter  # SlowAPIMiddleware reads it from here


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    access_logger.info(
        "%s %s -> %d in %.1fms (%s)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
        request.client.host if request.client else "-",
    )
    return response


app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(job_applications_router, prefix="/api/v1", tags=["Job Applications"])


# ---------------------------------------------------------------------------
# Error envelope
#
# Every failure leaves the API as {"error": {"code", "message", "detail"?}}.
# Route handlers raise HTTPException(detail={"code": ..., "message": ...});
# the handlers below bring framework errors into the same shape.
# ---------------------------------------------------------------------------


def _error_response(
    status_code: int,
    code: str,
    message: str,
    detail: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit on %s from %s", request.url.path, request.client.host if request.client else "-")
    # Window length of the exceeded limit, e.g. 60 for "N/minute".
    retry_after = exc.limit.limit.get_expiry()
    return _error_response(
        429,
        "rate_limited",
        "Too many attempts. Try again later.",
        detail=str(exc.detail),
        headers={"Retry-After": str(retry_after)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, "validation_error", "Request validation failed.", detail=str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Pass structured details through; wrap plain-string ones."""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only sees a generic 500."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Liveness plus a database round trip. Public and not rate-limited."""
    try:
        request.app.state.user_store.ping()
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        database = "error"
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=API_VERSION,
        components={"app": "ok", "database": database},
    )
