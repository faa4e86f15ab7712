"""Reading Quest FastAPI Application."""
from datetime import datetime, timezone
import logging

import psycopg2

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reading_quest.config import get_settings
from reading_quest.database import check_database, initialize_connection_pool, close_connection_pool
from reading_quest.services.cache_service import initialize_redis, close_redis
from reading_quest.models.schemas import HealthCheck
from reading_quest.routers import reading_plans, user_reading_plans, profile
from reading_quest.utils.exceptions import (
    DatabaseError,
    InvalidAddressingError,
    OutOfOrderAdvanceError,
    PlanCompletedError,
    StaleStateError,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

logger.info(f"CORS allowed origins: {settings.allowed_origins}")
app = FastAPI(
    title=settings.app_name,
    description="Bible reading plan progress, streaks and ranks",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def open_resources():
    """Open the database pool and Redis client."""
    try:
        initialize_connection_pool(minconn=2, maxconn=20)
    except psycopg2.Error:
        logger.error(f"{settings.app_name} cannot start without its database")
        raise
    initialize_redis()
    logger.info(f"{settings.app_name} ready")


@app.on_event("shutdown")
async def release_resources():
    close_redis()
    close_connection_pool()
    logger.info(f"{settings.app_name} stopped")


app.include_router(reading_plans.router)
app.include_router(user_reading_plans.router)
app.include_router(profile.router)


@app.get("/", response_model=HealthCheck)
async def health_check():
    """Health check endpoint; reports degraded while PostgreSQL is unreachable."""
    database_ok = check_database()
    return HealthCheck(
        status="healthy" if database_ok else "degraded",
        database="ok" if database_ok else "unavailable",
        timestamp=datetime.now(timezone.utc)
    )


# Error handlers
@app.exception_handler(DatabaseError)
async def database_error_handler(request, exc):
    logger.error(f"Database error: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(InvalidAddressingError)
@app.exception_handler(OutOfOrderAdvanceError)
@app.exception_handler(PlanCompletedError)
@app.exception_handler(StaleStateError)
async def progress_error_handler(request, exc: HTTPException):
    logger.warning(f"Rejected progress update on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )
