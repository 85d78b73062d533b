"""
LineWatch Sample Data
Default worker/station roster and a synthetic event generator for demos
and tests. Randomness comes from an injectable ``random.Random`` so runs
can be reproduced with a seed.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.services.event_hash import generate_event_hash, to_utc_naive

# (worker_id, name)
DEFAULT_WORKERS: List[Tuple[str, str]] = [
    ("W1", "Alex Morgan"),
    ("W2", "Priya Nair"),
    ("W3", "Diego Alvarez"),
    ("W4", "Mei Chen"),
    ("W5", "Samuel Okafor"),
    ("W6", "Hannah Weber"),
]

# (station_id, name, type)
DEFAULT_WORKSTATIONS: List[Tuple[str, str, str]] = [
    ("S1", "Assembly Line A", "assembly"),
    ("S2", "Assembly Line B", "assembly"),
    ("S3", "Quality Inspection", "inspection"),
    ("S4", "Packaging Station", "packaging"),
    ("S5", "Welding Bay", "welding"),
    ("S6", "CNC Machining", "machining"),
]

# Cumulative thresholds: 50% working, 20% idle, 10% absent, 20% product_count
EVENT_TYPE_THRESHOLDS = (
    (0.5, "working"),
    (0.7, "idle"),
    (0.8, "absent"),
    (1.0, "product_count"),
)

CONFIDENCE_RANGE = (0.85, 0.99)
PRODUCT_COUNT_RANGE = (1, 5)


def pick_event_type(rng: random.Random) -> str:
    roll = rng.random()
    for threshold, event_type in EVENT_TYPE_THRESHOLDS:
        if roll < threshold:
            return event_type
    return EVENT_TYPE_THRESHOLDS[-1][1]


def generate_sample_events(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    hours: int = 8,
    interval_minutes: int = 5,
    worker_ids: Optional[Sequence[str]] = None,
    station_ids: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Build one event per worker for every interval in the last ``hours``,
    walking back from ``now``. Worker ``i`` is placed on station
    ``i % len(stations)``. Returns insert-ready dicts, hash included.
    """
    if hours <= 0 or interval_minutes <= 0:
        raise ValueError("hours and interval_minutes must be positive")

    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    # Millisecond precision keeps the stored value and the hashed value equal
    now = to_utc_naive(now)
    now = now.replace(microsecond=(now.microsecond // 1000) * 1000)

    workers = list(worker_ids or [w[0] for w in DEFAULT_WORKERS])
    stations = list(station_ids or [s[0] for s in DEFAULT_WORKSTATIONS])
    steps = (hours * 60) // interval_minutes

    events: List[Dict[str, Any]] = []
    for i in range(steps):
        timestamp = now - timedelta(minutes=i * interval_minutes)
        for idx, worker_id in enumerate(workers):
            station_id = stations[idx % len(stations)]
            event_type = pick_event_type(rng)
            events.append({
                "timestamp": timestamp,
                "worker_id": worker_id,
                "workstation_id": station_id,
                "event_type": event_type,
                "confidence": round(rng.uniform(*CONFIDENCE_RANGE), 2),
                "count": rng.randint(*PRODUCT_COUNT_RANGE) if event_type == "product_count" else 1,
                "event_hash": generate_event_hash(timestamp, worker_id, station_id, event_type),
            })
    return events
