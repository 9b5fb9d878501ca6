"""
api/main.py -- FastAPI application entry point for the Favorite Countries API.

Run with:  python main.py serve
           uvicorn api.main:app --reload

Middleware stack:
  - CORSMiddleware        -- lets the browser client call with credentials
  - SessionMiddleware     -- signed, HTTP-only session cookie holding the token
  - SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter
  - security_headers      -- production-only hardening headers
  - log_requests          -- one log line per request with latency

Lifespan is a linear sequence of fallible steps: connect -> seed -> serve.
A database that cannot be reached at startup is logged and re-raised, so the
server process exits instead of serving requests it cannot answer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.content import router as content_router
from api.routes.favorites import router as favorites_router
from api.routes.users import router as users_router
from auth.roles import seed_roles
from auth.store import RoleStore, UserStore
from core.config import get_settings
from core.db import check_connection, create_db_engine
from core.errors import AppError
from favorites.store import FavoriteStore

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("countries.api")

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def attach_stores(app: FastAPI, engine: Engine) -> None:
    """Build every store on the shared engine, seed roles, and publish them on app.state.

    Shared by the real lifespan and the test lifespan in tests/conftest.py so
    both wire the application identically.
    """
    app.state.engine = engine
    app.state.role_store = RoleStore(engine)
    app.state.user_store = UserStore(engine)
    app.state.favorite_store = FavoriteStore(engine)
    inserted = seed_roles(app.state.role_store)
    logger.info("Stores initialized (%d roles seeded)", inserted)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Acquire the database engine on startup and dispose it on shutdown.

    Startup order matters:
      1. Connect -- fail fast if the database is unreachable.
      2. Stores + role seeding -- need a live connection.
      3. Serve.
    """
    logger.info("Favorite Countries API starting up (environment=%s)", _settings.environment)
    engine = create_db_engine(_settings.database_url)
    try:
        check_connection(engine)
    except SQLAlchemyError:
        logger.critical("Database connection error", exc_info=True)
        engine.dispose()
        raise
    attach_stores(app, engine)

    yield

    engine.dispose()
    logger.info("Favorite Countries API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Favorite Countries API",
    description="User accounts, role-based access and per-user favorite countries.",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.secret_key,
    session_cookie=_settings.session_cookie_name,
    max_age=_settings.token_expire_seconds,
    same_site=_settings.cookie_same_site,
    https_only=_settings.is_production,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "x-access-token", "Origin", "Accept"],
    max_age=3600,
)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if _settings.is_production:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
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

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(favorites_router, prefix="/api", tags=["Favorites"])
app.include_router(content_router, prefix="/api", tags=["Content"])
app.include_router(users_router, prefix="/api", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can read
# body["message"] without inspecting the status code first.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=code, message=message, detail=detail).model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        if get_settings().is_production:
            return _error(exc.status_code, exc.code, "Internal Server Error")
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    return _error(429, "rate_limited", "Too many requests.", str(exc.detail), {"Retry-After": str(retry_after)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed body fields are a client error: 400, not FastAPI's default 422."""
    missing = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
    return _error(400, "validation_error", "Missing or invalid fields.", ", ".join(m for m in missing if m) or None)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing 404/405 and any HTTPException raised by the framework."""
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback always goes to the log. The response carries the exception
    text outside production and a fixed message in production.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    message = "Internal Server Error" if get_settings().is_production else (str(exc) or type(exc).__name__)
    return _error(500, "internal_error", message)


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit and no auth -- load balancers must be able to poll it.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"], response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()
