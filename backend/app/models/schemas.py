"""
Pydantic Schemas for API request/response validation
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional, List
from datetime import datetime


EventType = Literal["working", "idle", "absent", "product_count"]


# ── Registry Schemas ─────────────────────────────────────
class WorkerResponse(BaseModel):
    id: int
    worker_id: str
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkstationResponse(BaseModel):
    id: int
    station_id: str
    name: str
    type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ── Event Schemas ────────────────────────────────────────
class EventPayload(BaseModel):
    timestamp: datetime
    worker_id: str = Field(min_length=1)
    workstation_id: str = Field(min_length=1)
    event_type: EventType
    confidence: Optional[float] = Field(default=None, allow_inf_nan=False)  # falsy -> DEFAULT_CONFIDENCE
    count: Optional[int] = None         # falsy -> 1


class EventResponse(BaseModel):
    id: int
    timestamp: datetime
    worker_id: str
    workstation_id: str
    event_type: str
    confidence: float
    count: int
    event_hash: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IngestResponse(BaseModel):
    message: str
    id: int


class GenerateResponse(BaseModel):
    message: str
    events_created: int


class ClearResponse(BaseModel):
    message: str
    events_deleted: int


# ── Metrics Schemas ──────────────────────────────────────
class WorkerMetricsResponse(BaseModel):
    worker_id: str
    name: str
    total_active_minutes: int
    total_idle_minutes: int
    utilization_percentage: int
    total_units_produced: int
    units_per_hour: float
    last_event_type: str
    last_seen: Optional[str] = None


class WorkstationMetricsResponse(BaseModel):
    station_id: str
    name: str
    type: Optional[str] = None
    total_active_minutes: int
    total_idle_minutes: int
    utilization_percentage: int
    total_units_produced: int
    units_per_hour: float
    unique_workers: int
    last_event_type: str
    last_seen: Optional[str] = None


class FactoryMetricsResponse(BaseModel):
    total_workers: int
    active_workers: int
    total_workstations: int
    active_workstations: int
    overall_utilization: int
    total_units_produced: int
    total_events: int
    avg_confidence: int


class MetricsResponse(BaseModel):
    factory: FactoryMetricsResponse
    workers: List[WorkerMetricsResponse]
    workstations: List[WorkstationMetricsResponse]
