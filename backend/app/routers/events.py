"""
Events Router
Ingestion, listing, sample-data generation and clearing of AI events.
"""

import logging
import random
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.models.schemas import (
    ClearResponse, EventPayload, EventResponse, GenerateResponse, IngestResponse,
)
from app.services import ingestion
from app.services.event_store import EventStore
from app.services.websocket_manager import ws_manager

logger = logging.getLogger("linewatch.events_router")

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.post("", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
def ingest_event(
    payload: EventPayload,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Ingest one event; replays of a stored event return the original id"""
    result = ingestion.ingest_event(EventStore(db), payload)
    if not result.created:
        response.status_code = status.HTTP_200_OK
    else:
        background_tasks.add_task(ws_manager.send_events_changed, "ingested", {"id": result.event.id})
    return IngestResponse(message=result.message, id=result.event.id)


@router.get("", response_model=List[EventResponse])
def list_events(
    worker_id: Optional[str] = None,
    station_id: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    """List events, newest first"""
    limit = min(limit or settings.EVENTS_PAGE_LIMIT, settings.EVENTS_PAGE_LIMIT)
    events = EventStore(db).list_events(
        worker_id=worker_id, station_id=station_id, skip=skip, limit=limit,
    )
    return [EventResponse.model_validate(e) for e in events]


@router.post("/generate", response_model=GenerateResponse)
def generate_sample_data(
    background_tasks: BackgroundTasks,
    seed: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Replace all events with a synthetic shift of sample data"""
    rng = random.Random(seed)
    result = ingestion.regenerate_sample_data(EventStore(db), rng=rng)
    background_tasks.add_task(
        ws_manager.send_events_changed, "generated", {"events_created": result.inserted}
    )

    if not result.complete:
        logger.error(
            "Sample data partially generated: %d events, %d/%d batches failed",
            result.inserted, result.failed_batches, result.total_batches,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": f"{result.failed_batches} of {result.total_batches} batches failed: "
                         f"{result.errors[0]}",
                "events_created": result.inserted,
                "failed_batches": result.failed_batches,
            },
        )
    return GenerateResponse(
        message="Sample data generated successfully",
        events_created=result.inserted,
    )


@router.delete("", response_model=ClearResponse)
def clear_events(background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """Delete every stored event"""
    deleted = ingestion.clear_events(EventStore(db))
    background_tasks.add_task(ws_manager.send_events_changed, "cleared", {"events_deleted": deleted})
    return ClearResponse(message="All events deleted", events_deleted=deleted)
