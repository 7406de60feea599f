# hr-dashboard/hr_dashboard/schemas/attendance.py
from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional

from hr_dashboard.schemas.access import AccessContext

class AttendanceLocation(str, Enum):
    OFFICE = "Office"
    REMOTE = "Remote"
    UNKNOWN = "Unknown"

class CurrentWeekStatus(str, Enum):
    COMPLIANT = "Compliant"
    AT_RISK = "At Risk"
    NON_COMPLIANT = "Non-Compliant"
    NO_DATA = "No Data"

class AttendanceRecord(BaseModel):
    email: EmailStr
    date: date
    location: AttendanceLocation = AttendanceLocation.UNKNOWN
    hours_logged: float = Field(default=0.0, ge=0)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value):
        if isinstance(value, AttendanceLocation):
            return value
        text = str(value or "").strip().lower()
        for member in AttendanceLocation:
            if member.value.lower() == text:
                return member
        return AttendanceLocation.UNKNOWN

class DailyAttendance(BaseModel):
    date: date
    location: AttendanceLocation
    hours: float

class WeeklyCompliance(BaseModel):
    employee_email: str
    week_start: date
    week_end: date
    office_days: int = 0
    remote_days: int = 0
    total_days_with_data: int = 0
    is_compliant: bool = False
    daily_breakdown: List[DailyAttendance] = []

class ComplianceEmployee(BaseModel):
    email: str
    name: str
    department: Optional[str] = None
    job_title: Optional[str] = None
    supervisor_email: Optional[str] = None

class EmployeeComplianceRecord(BaseModel):
    employee: ComplianceEmployee
    weeks: List[WeeklyCompliance]
    total_office_days: int
    total_remote_days: int
    total_weeks: int
    compliant_weeks: int
    compliance_rate: int
    current_week_status: CurrentWeekStatus

class DateRange(BaseModel):
    start_date: date
    end_date: date

class ComplianceSummary(BaseModel):
    total_employees: int = 0
    employees_with_data: int = 0
    overall_compliance_rate: int = 0
    current_week_compliant: int = 0
    current_week_at_risk: int = 0
    current_week_non_compliant: int = 0

class ComplianceReport(BaseModel):
    generated_at: datetime
    date_range: DateRange
    summary: ComplianceSummary
    employees: List[EmployeeComplianceRecord]
    access_context: Optional[AccessContext] = None
    rejected_rows: int = 0

class ComplianceTrendPoint(BaseModel):
    week_start: date
    compliance_rate: int
    compliant_count: int
    non_compliant_count: int
    total_employees: int
