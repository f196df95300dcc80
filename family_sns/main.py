"""FastAPI application entry point."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from family_sns.core.config import settings
from family_sns.core.exceptions import DomainError
from family_sns.core.structured_logging import build_log_context, configure_logging
from family_sns.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Never ship emails or tokens
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from family_sns.core.rate_limit import limiter

from family_sns.core.migrations import ensure_migrations, get_migration_status
from family_sns.services import media_service


# ============================================================================
# Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_MIGRATE:
        status = ensure_migrations(engine, auto_migrate=True)
        logger.info("Database schema at %s", ",".join(status.current_heads) or "<empty>")
    media_service.get_upload_dir()
    yield


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Family SNS API",
    description="Family-scoped social feed, direct messages and live updates",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Connection-Id", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


# ============================================================================
# Request logging
# ============================================================================

@app.middleware("http")
async def request_context(request: Request, call_next):
    """Assign or propagate X-Request-ID and log one line per request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    route = request.scope.get("route")
    context = build_log_context(
        request_id=request_id,
        route=getattr(route, "path", request.url.path),
        method=request.method,
        status_code=response.status_code,
        duration_ms=(time.perf_counter() - started) * 1000,
    )
    logger.info(
        "%s %s -> %s", request.method, context["route"], response.status_code, extra=context
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# ============================================================================
# Error handling
# ============================================================================

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Bad input is a 400 in this API, not FastAPI's default 422
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors()), "code": "validation_error"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra=build_log_context(request_id=getattr(request.state, "request_id", None)),
    )
    detail = str(exc) if settings.is_dev else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail, "code": "internal_error"})


# ============================================================================
# Routers
# ============================================================================

from family_sns.routers import auth, messages, notifications, posts, upload, users
from family_sns.routers import websocket as ws_router

app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(messages.router)
app.include_router(users.router)
app.include_router(upload.router)
app.include_router(notifications.router)

# WebSocket (real-time fan-out)
app.include_router(ws_router.router)

# Uploaded images
app.mount(
    media_service.UPLOAD_URL_PREFIX,
    StaticFiles(directory=media_service.get_upload_dir()),
    name="uploads",
)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and reports migration status.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

    try:
        status = get_migration_status(engine)
        migrations = status.health_label
    except Exception:
        logger.warning("Could not determine migration status", exc_info=True)
        migrations = "unknown"

    return {
        "status": "ok",
        "env": settings.ENV,
        "version": settings.VERSION,
        "database": "ok",
        "migrations": migrations,
    }
