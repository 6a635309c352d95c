"""
Unit Booking API - Main Application Entry Point

Guests book a unit for a run of nights and extend existing stays:
- Half-open [check-in, check-out) overlap rules with same-day turnover
- One booking per guest, enforced across units
- Per-unit serialization of check-and-write (in-process or Redis lock)
- Structured logging with request correlation
- Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import InvalidBookingInput, UnitLockUnavailable
from app.core.logging import setup_logging, get_logger
from app.core.metrics import metrics_endpoint
from app.api.router import api_router
from app.api.middleware import RequestLoggingMiddleware
from app.db.session import close_engine, get_db
from app.infrastructure.redis_client import close_redis, get_redis
from app.services.strategy_factory import get_unit_lock

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    unit_lock = get_unit_lock()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        unit_lock=unit_lock.name,
    )

    yield

    if unit_lock.name == "redis":
        await close_redis()
    await close_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Unit booking API with conflict-checked, concurrency-safe reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.exception_handler(InvalidBookingInput)
async def invalid_booking_input_handler(request: Request, exc: InvalidBookingInput):
    logger.warning("invalid_booking_input", field=exc.field, error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"kind": "invalid_input", "detail": str(exc)},
    )


@app.exception_handler(UnitLockUnavailable)
async def unit_lock_unavailable_handler(request: Request, exc: UnitLockUnavailable):
    logger.error("unit_lock_unavailable", key=exc.key, reason=exc.reason)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"kind": "lock_unavailable", "detail": "Booking is busy, please retry"},
        headers={"Retry-After": "1"},
    )


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
        return "connected"
    except Exception as e:
        logger.error("health_database_error", error=str(e))
        return "error"


async def _check_lock_backend() -> str:
    if get_unit_lock().name != "redis":
        return "local"
    try:
        await get_redis().ping()
        return "connected"
    except Exception as e:
        logger.error("health_redis_error", error=str(e))
        return "error"


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint for Docker and load balancers."""
    database = await _check_database(db)
    lock_backend = await _check_lock_backend()
    healthy = database == "connected" and lock_backend != "error"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "database": database,
            "unit_lock": lock_backend,
        },
    )


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
