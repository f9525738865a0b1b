"""
api/main.py -- FastAPI application entry point for the car rental backend.

Run with:  uvicorn asgi:app --reload
           python main.py

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for the frontend origin
  3. SlowAPIMiddleware     -- enforces rate limits from api.limiter

Lifespan builds the single Database handle and every store on startup, hangs
them on app.state, and closes the database on shutdown. Route handlers reach
their collaborators through request.app.state, never through module globals.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException

from api.limiter import limiter
from api.models import ClaimsOut, ErrorResponse, HealthResponse, ProtectedResponse, describe_validation_errors
from api.routes.v1.auth import admin_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.cars import router as cars_router
from api.routes.v1.contact import router as contact_router
from auth.dependencies import get_current_principal
from auth.models import ROLE_ADMIN, ROLE_USER, TokenClaims
from auth.store import PrincipalStore
from contact.store import ContactStore
from core.config import get_settings
from core.db import Database
from core.errors import AppError, StorageError
from inventory.service import InventoryService
from inventory.store import CarStore
from media.store import ImageStore

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("carrental.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database and build every store; close the database on shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    logger.info("Car rental API starting up")
    db = Database(_settings.database_url)
    app.state.db = db
    app.state.user_store = PrincipalStore(db, ROLE_USER)
    app.state.admin_store = PrincipalStore(db, ROLE_ADMIN)
    app.state.contacts = ContactStore(db)
    app.state.images = ImageStore(_settings.upload_dir)
    app.state.inventory = InventoryService(CarStore(db), app.state.images)
    logger.info("Database ready (%s), uploads in %s", db.engine.url.render_as_string(), _settings.upload_dir)

    yield

    db.close()
    logger.info("Car rental API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Car Rental API",
    description="Car inventory, user and admin authentication, and contact intake.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.frontend_url],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def security_headers(request: Request, call_next):
    """Set the baseline browser security headers on every response."""
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
# Same handlers under the /api/user prefix the web frontend calls.
app.include_router(auth_router, prefix="/api/user", tags=["Auth"], include_in_schema=False)
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(cars_router, prefix="/api/car", tags=["Cars"])
app.include_router(contact_router, prefix="/api/contact", tags=["Contact"])
# /uploads static files are mounted by asgi.py.


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope
# ({success: false, code, message}) so clients can parse errors uniformly.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, detail=detail if _settings.debug else None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors raised by stores, services, and the auth gate."""
    if isinstance(exc, StorageError):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.detail)
    return _error(exc.status_code, exc.code, exc.message, exc.detail)


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded, with a Retry-After hint.

    Must stay synchronous: SlowAPIMiddleware calls the registered handler
    directly and replaces coroutine handlers with its own default.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "rate_limited", "Too many requests, please try again later.", str(exc))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with the first validation failure as the message."""
    return _error(400, "validation_error", describe_validation_errors(exc.errors()), str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 for unknown routes, 405, ...) in the envelope."""
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log only. Clients get a generic message, plus
    the exception text in DEBUG mode.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "Internal server error", repr(exc))


# ---------------------------------------------------------------------------
# Top-level endpoints
#
# Defined directly in main.py (not in a router) so they are always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/", include_in_schema=False, response_class=PlainTextResponse)
async def home() -> str:
    return "Welcome to the CAR-RENTAL Backend API!"


@limiter.exempt
@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability.

    Exempt from rate limiting -- load balancer probes must not be throttled.
    """
    db_ok = request.app.state.db.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )


@app.get("/api/protected", tags=["Auth"])
async def protected(principal: TokenClaims = Depends(get_current_principal)) -> ProtectedResponse:
    """Echo the identity the authorization gate resolved from the token."""
    return ProtectedResponse(message="This is protected data", principal=ClaimsOut.from_claims(principal))
