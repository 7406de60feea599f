# hr-dashboard/hr_dashboard/api/v1/endpoints/sync.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Literal
from datetime import datetime
from pydantic import BaseModel

from hr_dashboard.api.deps import get_directory_client, get_warehouse_client
from hr_dashboard.core import security
from hr_dashboard.db import session
from hr_dashboard.schemas.sync import SyncResult
from hr_dashboard.services import sync as sync_service

router = APIRouter()

class SyncStatusOut(BaseModel):
    id: int
    sync_type: str
    sync_source: str
    status: str
    records_processed: int
    records_created: int
    records_updated: int
    records_failed: int
    records_rejected: int
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    class Config:
        from_attributes = True

@router.post("", response_model=List[SyncResult])
async def trigger_sync(
    days: int = Query(default=7, ge=1, le=90),
    api_key: str = Depends(security.get_sync_api_key),
    db: Session = Depends(session.get_db),
    directory=Depends(get_directory_client),
    warehouse=Depends(get_warehouse_client)
):
    """ Called by the scheduler: refreshes the employee and productivity cache. """
    return await sync_service.run_sync(db, directory, warehouse, days=days)

@router.get("/status/{sync_type}", response_model=SyncStatusOut)
def read_sync_status(
    sync_type: Literal["employees", "productivity"],
    api_key: str = Depends(security.get_sync_api_key),
    db: Session = Depends(session.get_db)
):
    latest = sync_service.latest_sync(db, sync_type)
    if latest is None:
        raise HTTPException(status_code=404, detail=f"No {sync_type} sync has run yet")
    return latest
