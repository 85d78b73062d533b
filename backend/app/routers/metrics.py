"""
Metrics Router
Dashboard metrics recomputed from the current event set on every request.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.schemas import MetricsResponse
from app.services.event_store import EventStore
from app.services.metrics import compute_dashboard_metrics

router = APIRouter(prefix="/api/metrics", tags=["Metrics"])


@router.get("", response_model=MetricsResponse)
def get_metrics(
    worker_id: Optional[str] = None,
    station_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Factory, per-worker and per-workstation metrics"""
    store = EventStore(db)
    metrics = compute_dashboard_metrics(
        store.list_workers(),
        store.list_workstations(),
        store.list_events(),
        worker_id=worker_id,
        station_id=station_id,
    )
    return metrics.to_dict()
