"""
Worker & Workstation Registry Models
"""

from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from app.core.database import Base


class Worker(Base):
    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(String(50), unique=True, nullable=False, index=True)  # "W1", "W2", ...
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Workstation(Base):
    __tablename__ = "workstations"

    id = Column(Integer, primary_key=True, index=True)
    station_id = Column(String(50), unique=True, nullable=False, index=True)  # "S1", "S2", ...
    name = Column(String(100), nullable=False)
    type = Column(String(50), nullable=True)  # assembly, inspection, packaging, welding, machining
    created_at = Column(DateTime, default=datetime.utcnow)
