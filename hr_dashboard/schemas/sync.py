# hr-dashboard/hr_dashboard/schemas/sync.py
from pydantic import BaseModel
from typing import Optional

class SyncResult(BaseModel):
    sync_type: str
    success: bool
    sync_id: Optional[int] = None
    records_processed: int = 0
    records_created: int = 0
    records_updated: int = 0
    records_failed: int = 0
    records_rejected: int = 0
    error: Optional[str] = None
