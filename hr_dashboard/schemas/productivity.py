# hr-dashboard/hr_dashboard/schemas/productivity.py
from datetime import date
from enum import Enum
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional

from hr_dashboard.schemas.access import AccessContext
from hr_dashboard.schemas.employee import Employee

class GroupBy(str, Enum):
    EMPLOYEE = "employee"
    DEPARTMENT = "department"
    ORGANIZATION = "organization"

class SortField(str, Enum):
    DISPLAY_NAME = "display_name"
    AVG_PRODUCTIVITY_SCORE = "avg_productivity_score"
    TOTAL_PRODUCTIVE_HOURS = "total_productive_hours"
    DAYS_TRACKED = "days_tracked"

class ProductivityRecord(BaseModel):
    email: EmailStr
    username: str
    date: date
    productive_seconds: float = Field(default=0, ge=0)
    unproductive_seconds: float = Field(default=0, ge=0)
    neutral_seconds: float = Field(default=0, ge=0)
    total_seconds: float = Field(default=0, ge=0)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

class Summary(BaseModel):
    """One aggregated row: an employee, a department or the whole organisation."""
    key: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    employee_count: int = 0
    avg_productivity_score: Optional[float] = None
    total_productive_hours: float = 0.0
    total_hours: float = 0.0
    days_tracked: int = 0

class OrganizationSummary(BaseModel):
    total_employees: int = 0
    avg_productivity_score: Optional[float] = None
    total_productive_hours: float = 0.0
    total_tracked_hours: float = 0.0
    productive_percent: float = 0.0

class ProductivityReport(BaseModel):
    start_date: date
    end_date: date
    group_by: GroupBy
    rows: List[Summary]
    organization: OrganizationSummary
    unmatched_records: int = 0
    rejected_rows: int = 0
    access_context: Optional[AccessContext] = None

class TeamProductivityPage(BaseModel):
    data: List[Summary]
    total: int
    page: int
    page_size: int
    has_more: bool

class DailySummaryRow(BaseModel):
    date: date
    user_name: str
    productive_hours: float
    unproductive_hours: float
    neutral_hours: float
    total_hours: float
    productivity_percent: float

class DailySummaryResult(BaseModel):
    data: List[DailySummaryRow]
    access_context: Optional[AccessContext] = None
    total_records: int
    rejected_rows: int = 0

class ProductivityTrendPoint(BaseModel):
    date: date
    avg_productivity_score: Optional[float] = None
    total_productive_hours: float = 0.0
    employee_count: int = 0

class EmployeeProductivity(BaseModel):
    """ One employee's daily series and the summary over the same range. """
    employee: Employee
    start_date: date
    end_date: date
    days: List[DailySummaryRow]
    summary: Summary
