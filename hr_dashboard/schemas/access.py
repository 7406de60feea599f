# hr-dashboard/hr_dashboard/schemas/access.py
from enum import Enum
from pydantic import BaseModel
from typing import Optional, Set

class AccessLevel(str, Enum):
    ALL = "all"
    TEAM = "team"
    SELF = "self"

class AccessContext(BaseModel):
    requester_email: str
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    is_hr_admin: bool = False
    is_manager: bool = False
    allowed_emails: Set[str]
    direct_report_count: int = 0
    total_report_count: int = 0
