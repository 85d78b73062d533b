"""
LineWatch Ingestion Service
Validated payload → hash → idempotent insert, plus the bulk operations
(sample-data regeneration, clear) used by the dashboard.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.core.config import settings
from app.models.event import AIEvent
from app.models.schemas import EventPayload
from app.services.event_hash import generate_event_hash, to_utc_naive
from app.services.event_store import BulkInsertResult, EventStore
from app.services.sample_data import generate_sample_events

logger = logging.getLogger("linewatch.ingestion")


@dataclass
class IngestResult:
    event: AIEvent
    created: bool

    @property
    def message(self) -> str:
        return "Event ingested" if self.created else "Duplicate event ignored"


def build_event_row(payload: EventPayload) -> dict:
    """Apply defaults and compute the dedup hash for one payload"""
    timestamp = to_utc_naive(payload.timestamp)
    confidence = payload.confidence or settings.DEFAULT_CONFIDENCE
    return {
        "timestamp": timestamp,
        "worker_id": payload.worker_id,
        "workstation_id": payload.workstation_id,
        "event_type": payload.event_type,
        "confidence": confidence,
        "count": payload.count or 1,
        "event_hash": generate_event_hash(
            timestamp, payload.worker_id, payload.workstation_id, payload.event_type
        ),
    }


def ingest_event(store: EventStore, payload: EventPayload) -> IngestResult:
    """
    Store one event. A retry of an already-stored observation returns the
    existing row instead of failing.
    """
    row = build_event_row(payload)
    event, created = store.insert_event(row)
    if created:
        logger.info(
            "Event #%s ingested: %s %s@%s",
            event.id, row["event_type"], row["worker_id"], row["workstation_id"],
        )
    return IngestResult(event=event, created=created)


def regenerate_sample_data(
    store: EventStore,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> BulkInsertResult:
    """Wipe all events and insert a fresh synthetic shift"""
    store.delete_all_events()
    rows = generate_sample_events(
        now=now,
        rng=rng,
        hours=settings.SAMPLE_HOURS,
        interval_minutes=settings.SAMPLE_INTERVAL_MINUTES,
    )
    logger.info("Generated %d sample events", len(rows))
    return store.bulk_insert(rows, batch_size=settings.INSERT_BATCH_SIZE)


def clear_events(store: EventStore) -> int:
    return store.delete_all_events()
