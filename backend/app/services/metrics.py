"""
LineWatch Metrics Aggregator
Turns the raw event stream plus the worker/station registries into
per-worker, per-workstation and factory-wide utilization statistics.

Everything here is pure: no I/O, no shared state, inputs are never
mutated. Inputs may be ORM rows, dataclasses or plain dicts.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.services.event_hash import canonical_timestamp, parse_timestamp

logger = logging.getLogger("linewatch.metrics")


# Each event accounts for a fixed slice of wall-clock time
EVENT_DURATION_MINUTES = 5

NO_EVENT_TYPE = "absent"


@dataclass
class WorkerMetrics:
    worker_id: str
    name: str
    total_active_minutes: int = 0
    total_idle_minutes: int = 0
    utilization_percentage: int = 0
    total_units_produced: int = 0
    units_per_hour: float = 0.0
    last_event_type: str = NO_EVENT_TYPE
    last_seen: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "name": self.name,
            "total_active_minutes": self.total_active_minutes,
            "total_idle_minutes": self.total_idle_minutes,
            "utilization_percentage": self.utilization_percentage,
            "total_units_produced": self.total_units_produced,
            "units_per_hour": self.units_per_hour,
            "last_event_type": self.last_event_type,
            "last_seen": canonical_timestamp(self.last_seen) if self.last_seen else None,
        }


@dataclass
class WorkstationMetrics:
    station_id: str
    name: str
    type: Optional[str] = None
    total_active_minutes: int = 0
    total_idle_minutes: int = 0
    utilization_percentage: int = 0
    total_units_produced: int = 0
    units_per_hour: float = 0.0
    unique_workers: int = 0
    last_event_type: str = NO_EVENT_TYPE
    last_seen: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "name": self.name,
            "type": self.type,
            "total_active_minutes": self.total_active_minutes,
            "total_idle_minutes": self.total_idle_minutes,
            "utilization_percentage": self.utilization_percentage,
            "total_units_produced": self.total_units_produced,
            "units_per_hour": self.units_per_hour,
            "unique_workers": self.unique_workers,
            "last_event_type": self.last_event_type,
            "last_seen": canonical_timestamp(self.last_seen) if self.last_seen else None,
        }


@dataclass
class FactoryMetrics:
    total_workers: int = 0
    active_workers: int = 0
    total_workstations: int = 0
    active_workstations: int = 0
    overall_utilization: int = 0
    total_units_produced: int = 0
    total_events: int = 0
    avg_confidence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_workers": self.total_workers,
            "active_workers": self.active_workers,
            "total_workstations": self.total_workstations,
            "active_workstations": self.active_workstations,
            "overall_utilization": self.overall_utilization,
            "total_units_produced": self.total_units_produced,
            "total_events": self.total_events,
            "avg_confidence": self.avg_confidence,
        }


@dataclass
class DashboardMetrics:
    factory: FactoryMetrics
    workers: List[WorkerMetrics] = field(default_factory=list)
    workstations: List[WorkstationMetrics] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factory": self.factory.to_dict(),
            "workers": [w.to_dict() for w in self.workers],
            "workstations": [s.to_dict() for s in self.workstations],
        }


# ──────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────

def _get(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style object"""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def round_half_up(value: float, digits: int = 0):
    """
    Round halves away from zero (2.5 -> 3), unlike the builtin round().
    Returns an int when ``digits`` is 0.
    """
    quantum = Decimal(1).scaleb(-digits)
    result = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(result) if digits == 0 else float(result)


def _as_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _units(value: Any) -> int:
    """Unit count of a product_count event; missing or zero-like means 1"""
    try:
        units = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return units or 1


def _event_time(event: Any) -> Optional[datetime]:
    try:
        return parse_timestamp(_get(event, "timestamp"))
    except (TypeError, ValueError, OverflowError):
        return None


# ──────────────────────────────────────────────────────
# Per-entity reduction (shared by workers and workstations)
# ──────────────────────────────────────────────────────

@dataclass
class _ActivitySummary:
    total_active_minutes: int = 0
    total_idle_minutes: int = 0
    utilization_percentage: int = 0
    total_units_produced: int = 0
    units_per_hour: float = 0.0
    last_event_type: str = NO_EVENT_TYPE
    last_seen: Optional[datetime] = None


def summarize_events(events: Iterable[Any]) -> _ActivitySummary:
    """
    Reduce one entity's events to durations, utilization, output and the
    most recent observation. Among events sharing the latest timestamp the
    first one in input order wins.
    """
    working = idle = 0
    units = 0
    last_event = None
    last_time: Optional[datetime] = None

    for event in events:
        event_type = _get(event, "event_type")
        if event_type == "working":
            working += 1
        elif event_type == "idle":
            idle += 1
        elif event_type == "product_count":
            units += _units(_get(event, "count"))

        ts = _event_time(event)
        if ts is not None and (last_time is None or ts > last_time):
            last_time = ts
            last_event = event

    summary = _ActivitySummary()
    summary.total_active_minutes = working * EVENT_DURATION_MINUTES
    summary.total_idle_minutes = idle * EVENT_DURATION_MINUTES
    summary.total_units_produced = units

    total_time = summary.total_active_minutes + summary.total_idle_minutes
    if total_time > 0:
        summary.utilization_percentage = round_half_up(
            summary.total_active_minutes / total_time * 100
        )

    active_hours = summary.total_active_minutes / 60
    if active_hours > 0:
        summary.units_per_hour = round_half_up(units / active_hours, 1)

    if last_event is not None:
        summary.last_event_type = _get(last_event, "event_type") or NO_EVENT_TYPE
        summary.last_seen = last_time

    return summary


def _group_by(events: Iterable[Any], key: str) -> Dict[Any, List[Any]]:
    groups: Dict[Any, List[Any]] = {}
    for event in events:
        groups.setdefault(_get(event, key), []).append(event)
    return groups


# ──────────────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────────────

def compute_worker_metrics(workers: Sequence[Any], events: Sequence[Any]) -> List[WorkerMetrics]:
    """One WorkerMetrics per registered worker, in registry order"""
    by_worker = _group_by(events, "worker_id")
    results: List[WorkerMetrics] = []
    for worker in workers:
        worker_id = _get(worker, "worker_id")
        s = summarize_events(by_worker.get(worker_id, []))
        results.append(WorkerMetrics(
            worker_id=worker_id,
            name=_get(worker, "name", worker_id),
            total_active_minutes=s.total_active_minutes,
            total_idle_minutes=s.total_idle_minutes,
            utilization_percentage=s.utilization_percentage,
            total_units_produced=s.total_units_produced,
            units_per_hour=s.units_per_hour,
            last_event_type=s.last_event_type,
            last_seen=s.last_seen,
        ))
    return results


def compute_workstation_metrics(
    workstations: Sequence[Any], events: Sequence[Any]
) -> List[WorkstationMetrics]:
    """One WorkstationMetrics per registered station, in registry order"""
    by_station = _group_by(events, "workstation_id")
    results: List[WorkstationMetrics] = []
    for station in workstations:
        station_id = _get(station, "station_id")
        station_events = by_station.get(station_id, [])
        s = summarize_events(station_events)
        results.append(WorkstationMetrics(
            station_id=station_id,
            name=_get(station, "name", station_id),
            type=_get(station, "type"),
            total_active_minutes=s.total_active_minutes,
            total_idle_minutes=s.total_idle_minutes,
            utilization_percentage=s.utilization_percentage,
            total_units_produced=s.total_units_produced,
            units_per_hour=s.units_per_hour,
            unique_workers=len({_get(e, "worker_id") for e in station_events} - {None}),
            last_event_type=s.last_event_type,
            last_seen=s.last_seen,
        ))
    return results


def compute_factory_metrics(
    workers: Sequence[Any],
    workstations: Sequence[Any],
    events: Sequence[Any],
    worker_metrics: Sequence[WorkerMetrics],
    workstation_metrics: Sequence[WorkstationMetrics],
) -> FactoryMetrics:
    """Factory-wide rollup over the per-entity metrics and the raw event set"""
    factory = FactoryMetrics(
        total_workers=len(workers),
        total_workstations=len(workstations),
        total_events=len(events),
    )
    factory.active_workers = sum(1 for w in worker_metrics if w.last_event_type == "working")
    factory.active_workstations = sum(
        1 for s in workstation_metrics if s.utilization_percentage > 0
    )
    if worker_metrics:
        factory.overall_utilization = round_half_up(
            sum(w.utilization_percentage for w in worker_metrics) / len(worker_metrics)
        )
    factory.total_units_produced = sum(w.total_units_produced for w in worker_metrics)
    if events:
        avg_confidence = sum(_as_float(_get(e, "confidence")) for e in events) / len(events)
        factory.avg_confidence = round_half_up(avg_confidence * 100)
    return factory


def filter_events(
    events: Iterable[Any],
    worker_id: Optional[str] = None,
    station_id: Optional[str] = None,
) -> List[Any]:
    """Keep events matching the given worker and/or station (None = any)"""
    return [
        e for e in events
        if (worker_id is None or _get(e, "worker_id") == worker_id)
        and (station_id is None or _get(e, "workstation_id") == station_id)
    ]


def compute_dashboard_metrics(
    workers: Sequence[Any],
    workstations: Sequence[Any],
    events: Sequence[Any],
    worker_id: Optional[str] = None,
    station_id: Optional[str] = None,
) -> DashboardMetrics:
    """
    Full dashboard computation. The worker/station filters narrow the event
    set only; every registered entity is still reported.
    """
    if worker_id is not None or station_id is not None:
        events = filter_events(events, worker_id, station_id)

    worker_metrics = compute_worker_metrics(workers, events)
    workstation_metrics = compute_workstation_metrics(workstations, events)
    factory = compute_factory_metrics(
        workers, workstations, events, worker_metrics, workstation_metrics
    )
    logger.debug(
        "Metrics computed: %d workers, %d stations, %d events",
        len(workers), len(workstations), len(events),
    )
    return DashboardMetrics(
        factory=factory,
        workers=worker_metrics,
        workstations=workstation_metrics,
    )
