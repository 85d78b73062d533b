"""
AI Event Model
Append-only store of computer-vision classification events.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime
from datetime import datetime
from app.core.database import Base


class AIEvent(Base):
    """One classification emitted by the vision pipeline. Never updated."""
    __tablename__ = "ai_events"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, nullable=False, index=True)  # UTC
    worker_id = Column(String(50), nullable=False, index=True)
    workstation_id = Column(String(50), nullable=False, index=True)
    event_type = Column(String(20), nullable=False)  # working, idle, absent, product_count
    confidence = Column(Float, default=0.95)
    count = Column(Integer, default=1)
    # Unique index is the deduplication guard; inserts race on it, not on a lookup
    event_hash = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
