"""
LineWatch - FastAPI Application Entry Point
Factory-floor activity metrics from computer-vision events
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.services.event_store import EventStore
from app.utils.logger import setup_logging

# Setup logging
setup_logging("DEBUG" if settings.DEBUG else "INFO")
logger = logging.getLogger("linewatch.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager"""
    logger.info("=" * 60)
    logger.info("  LineWatch Factory Metrics - Starting")
    logger.info("=" * 60)

    init_db()
    logger.info("Database initialized")

    if settings.SEED_REGISTRY:
        db = SessionLocal()
        try:
            EventStore(db).seed_registry()
        finally:
            db.close()

    logger.info(f"Environment: {settings.LINEWATCH_ENV}")
    logger.info(f"CORS Origins: {settings.cors_origins_list}")
    logger.info("LineWatch is ready!")
    logger.info("=" * 60)

    yield

    logger.info("LineWatch shutting down...")


# Create FastAPI app
app = FastAPI(
    title="LineWatch - Factory Metrics API",
    description="Worker and workstation utilization derived from AI vision events",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error payloads: always {"error": message} ──

def _is_missing(err: dict) -> bool:
    # Absent, null and empty-string values all count as missing
    return err.get("type") in ("missing", "string_too_short") or (
        "input" in err and err["input"] is None
    )


def _validation_message(exc: RequestValidationError) -> str:
    missing = [
        str(err["loc"][-1]) for err in exc.errors()
        if _is_missing(err) and err.get("loc")
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid {field or 'request'}: {first.get('msg', 'validation failed')}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = _validation_message(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc.orig) if getattr(exc, "orig", None) else str(exc)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc) or "Unknown error"},
    )


# Include routers
from app.routers import events, metrics, registry, websocket

app.include_router(events.router)
app.include_router(metrics.router)
app.include_router(registry.router)
app.include_router(websocket.router)


# Health check endpoint
@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": "LineWatch",
        "version": "1.0.0",
    }


@app.get("/api/info")
def api_info():
    return {
        "name": "LineWatch API",
        "version": "1.0.0",
        "description": "Factory activity metrics from AI vision events",
        "endpoints": {
            "events": "/api/events",
            "generate": "/api/events/generate",
            "metrics": "/api/metrics",
            "workers": "/api/workers",
            "workstations": "/api/workstations",
            "websocket_events": "/ws/events",
            "health": "/health",
        }
    }
