"""FastAPI application entrypoint — lifespan, routers, middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from redis.asyncio import Redis
from sqlalchemy import text

from farmacie.config import get_settings
from farmacie.database import engine, init_models
from farmacie.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from farmacie.middleware.rate_limit import RateLimitMiddleware
from farmacie.routes import auth, seeds
from farmacie.services.storage import ImageStorage

logger = structlog.get_logger("farmacie")

# Checks that must pass for /health/ready to answer 200; others only mark it degraded.
REQUIRED_CHECKS = ("database",)


async def _connect_redis(url: str) -> Redis | None:
    """Connect the rate limiter backend; the API keeps serving without it."""
    redis = Redis.from_url(url, decode_responses=True)
    try:
        await redis.ping()
    except Exception as exc:
        logger.warning("redis unavailable, rate limiting disabled", error=str(exc))
        await redis.aclose()
        return None
    return redis


async def _check_database() -> dict[str, Any]:
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
    except Exception as exc:
        return {"ok": False, "message": str(exc)}
    return {"ok": True, "message": "ok"}


async def _check_redis(app: FastAPI) -> dict[str, Any]:
    redis = getattr(app.state, "redis", None)
    if redis is None:
        return {"ok": False, "message": "not connected"}
    try:
        await redis.ping()
    except Exception as exc:
        return {"ok": False, "message": str(exc)}
    return {"ok": True, "message": "ok"}


async def _run_readiness_checks(app: FastAPI) -> dict[str, dict[str, Any]]:
    return {
        "database": await _check_database(),
        "redis": await _check_redis(app),
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Configure ORM mappings (and create tables when enabled)
      3. Verify database connectivity
      4. Connect to Redis for rate limiting (optional)
      5. Ensure the image upload directory exists

    Shutdown:
      1. Close Redis connection pool
      2. Dispose SQLAlchemy engine
    """
    settings = get_settings()
    configure_structured_logging()
    logger.info(
        "Farmacie seed catalog starting",
        log_level=settings.log_level,
        storage_root=str(settings.storage_root),
    )

    app.state.redis = None
    try:
        tables = await init_models(engine, create_tables=settings.create_tables_on_startup)
        logger.info("store initialized", tables=tables)

        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))

        app.state.redis = await _connect_redis(settings.redis_url)
        ImageStorage(settings).ensure_dirs()
    except Exception as exc:
        logger.exception("startup failure", error=str(exc))
        raise

    yield

    logger.info("Farmacie seed catalog shutting down")
    if app.state.redis is not None:
        await app.state.redis.aclose()
    await engine.dispose()


app = FastAPI(
    title="Farmacie Seed Catalog API",
    description=(
        "Global seed catalog: seed variety listings, their images, and "
        "cross-linking with the crop simulator's variety registry."
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health checks ───────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check — verifies the API process is alive."""
    return {
        "status": "ok",
        "service": "farmacie",
        "version": "0.1.0",
    }


@app.get("/health/ready", tags=["system"])
async def readiness_check() -> JSONResponse:
    """Readiness: database is required, Redis only degrades (rate limiting off)."""
    checks = await _run_readiness_checks(app)
    ready = all(checks[name]["ok"] for name in REQUIRED_CHECKS if name in checks)
    healthy = all(check["ok"] for check in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ok" if healthy else "degraded", "checks": checks},
    )


# ── Router registration ────────────────────────────────────────────────────
app.include_router(auth.router, prefix="/api/v1")
app.include_router(seeds.router, prefix="/api/v1")

# ── Uploaded images ─────────────────────────────────────────────────────────
_settings = get_settings()
app.mount(
    _settings.static_url_path,
    StaticFiles(directory=_settings.static_dir, check_dir=False),
    name="static",
)
