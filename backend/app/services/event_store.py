"""
LineWatch Event Store
==========================
Thin repository over the ``ai_events``, ``workers`` and ``workstations``
tables. Every write goes through here so transaction handling lives in
one place.

Deduplication is enforced by the UNIQUE index on ``ai_events.event_hash``:
``insert_event`` inserts first and, on a constraint violation, hands back
the row that won the race.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.event import AIEvent
from app.models.registry import Worker, Workstation
from app.services.sample_data import DEFAULT_WORKERS, DEFAULT_WORKSTATIONS

logger = logging.getLogger("linewatch.store")


@dataclass
class BulkInsertResult:
    """Outcome of a chunked insert; each chunk commits on its own"""
    inserted: int = 0
    total_batches: int = 0
    failed_batches: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.failed_batches == 0


class EventStore:
    """Repository bound to one SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    # ──────────────────────────────────────────────────────
    # Registries
    # ──────────────────────────────────────────────────────

    def list_workers(self) -> List[Worker]:
        return self.db.query(Worker).order_by(asc(Worker.worker_id)).all()

    def list_workstations(self) -> List[Workstation]:
        return self.db.query(Workstation).order_by(asc(Workstation.station_id)).all()

    def seed_registry(self) -> Tuple[int, int]:
        """
        Insert the default roster into empty registries.
        Returns (workers_added, workstations_added).
        """
        workers_added = stations_added = 0
        try:
            if self.db.query(Worker).count() == 0:
                for worker_id, name in DEFAULT_WORKERS:
                    self.db.add(Worker(worker_id=worker_id, name=name))
                    workers_added += 1
            if self.db.query(Workstation).count() == 0:
                for station_id, name, station_type in DEFAULT_WORKSTATIONS:
                    self.db.add(Workstation(station_id=station_id, name=name, type=station_type))
                    stations_added += 1
            self.db.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to seed registry: %s", exc)
            self.db.rollback()
            raise
        if workers_added or stations_added:
            logger.info(
                "Registry seeded (%d workers, %d workstations)",
                workers_added, stations_added,
            )
        return workers_added, stations_added

    # ──────────────────────────────────────────────────────
    # Events — reads
    # ──────────────────────────────────────────────────────

    def list_events(
        self,
        worker_id: Optional[str] = None,
        station_id: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[AIEvent]:
        """Newest first; equal timestamps keep insertion order"""
        query = self.db.query(AIEvent)
        if worker_id:
            query = query.filter(AIEvent.worker_id == worker_id)
        if station_id:
            query = query.filter(AIEvent.workstation_id == station_id)
        query = query.order_by(desc(AIEvent.timestamp), asc(AIEvent.id))
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_events(self) -> int:
        return self.db.query(AIEvent).count()

    def get_by_hash(self, event_hash: str) -> Optional[AIEvent]:
        return self.db.query(AIEvent).filter(AIEvent.event_hash == event_hash).first()

    # ──────────────────────────────────────────────────────
    # Events — writes
    # ──────────────────────────────────────────────────────

    def insert_event(self, row: Dict[str, Any]) -> Tuple[AIEvent, bool]:
        """
        Insert one event. Returns ``(event, created)``; ``created`` is False
        when a row with the same hash already existed.
        """
        event = AIEvent(**row)
        self.db.add(event)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_hash(row["event_hash"])
            if existing is None:
                # Violation of some other constraint
                raise
            logger.info("Duplicate event ignored (hash=%s, id=%s)", row["event_hash"], existing.id)
            return existing, False
        except SQLAlchemyError as exc:
            logger.error("Event insert failed: %s", exc)
            self.db.rollback()
            raise
        self.db.refresh(event)
        return event, True

    def bulk_insert(self, rows: Sequence[Dict[str, Any]], batch_size: int = 100) -> BulkInsertResult:
        """
        Insert ``rows`` in chunks of ``batch_size``. A failing chunk is rolled
        back and recorded; the remaining chunks still run.
        """
        result = BulkInsertResult()
        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            result.total_batches += 1
            try:
                self.db.add_all([AIEvent(**row) for row in batch])
                self.db.commit()
                result.inserted += len(batch)
            except SQLAlchemyError as exc:
                self.db.rollback()
                result.failed_batches += 1
                result.errors.append(str(exc))
                logger.error(
                    "Batch %d (%d rows) failed: %s",
                    result.total_batches, len(batch), exc,
                )
        logger.info(
            "Bulk insert: %d rows in %d batches (%d failed)",
            result.inserted, result.total_batches, result.failed_batches,
        )
        return result

    def delete_all_events(self) -> int:
        try:
            deleted = self.db.query(AIEvent).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to clear events: %s", exc)
            self.db.rollback()
            raise
        logger.info("Cleared %d events", deleted)
        return deleted
