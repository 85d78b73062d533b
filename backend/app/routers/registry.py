"""
Registry Router
Read-only listings of workers and workstations.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.schemas import WorkerResponse, WorkstationResponse
from app.services.event_store import EventStore

router = APIRouter(prefix="/api", tags=["Registry"])


@router.get("/workers", response_model=List[WorkerResponse])
def list_workers(db: Session = Depends(get_db)):
    return [WorkerResponse.model_validate(w) for w in EventStore(db).list_workers()]


@router.get("/workstations", response_model=List[WorkstationResponse])
def list_workstations(db: Session = Depends(get_db)):
    return [WorkstationResponse.model_validate(s) for s in EventStore(db).list_workstations()]
