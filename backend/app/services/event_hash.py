"""
LineWatch Event Hasher
Deterministic deduplication key over an event's identifying fields.

The same function is used by the ingestion endpoint, the sample-data
generator and the tests, so every caller agrees on the key.
"""

from datetime import datetime, timezone
from typing import Union

TimestampLike = Union[datetime, str]

HASH_DELIMITER = "|"


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Convert a datetime or ISO-8601 string into an aware UTC datetime.
    Naive values are taken to be UTC already. Raises ValueError/TypeError
    on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_naive(value: TimestampLike) -> datetime:
    """UTC wall-clock datetime without tzinfo, as stored in the database"""
    return parse_timestamp(value).replace(tzinfo=None)


def canonical_timestamp(value: TimestampLike) -> str:
    """
    Fixed-precision UTC form, e.g. ``2024-05-01T08:00:00.000Z``.
    Sub-millisecond digits are truncated.
    """
    dt = parse_timestamp(value)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def generate_event_hash(
    timestamp: TimestampLike,
    worker_id: str,
    workstation_id: str,
    event_type: str,
) -> str:
    """Join the four identifying fields into the event's dedup key"""
    return HASH_DELIMITER.join((
        canonical_timestamp(timestamp),
        str(worker_id),
        str(workstation_id),
        str(event_type),
    ))
