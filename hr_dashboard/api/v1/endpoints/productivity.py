# hr-dashboard/hr_dashboard/api/v1/endpoints/productivity.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from datetime import date

from hr_dashboard.api.deps import get_report_service
from hr_dashboard.core import security
from hr_dashboard.schemas.productivity import (
    DailySummaryResult, EmployeeProductivity, GroupBy, ProductivityReport,
    ProductivityTrendPoint, SortField, TeamProductivityPage,
)
from hr_dashboard.services.reports import ReportService

router = APIRouter()

def _check_range(start_date: date, end_date: date):
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must not be before start_date")

@router.get("/summary", response_model=ProductivityReport)
async def read_productivity_summary(
    start_date: date,
    end_date: date,
    group_by: GroupBy = GroupBy.EMPLOYEE,
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Productivity per employee, department or for the whole visible organisation. """
    _check_range(start_date, end_date)
    return await service.get_productivity_summary(requester, start_date, end_date, group_by)

@router.get("/team", response_model=TeamProductivityPage)
async def read_team_productivity(
    start_date: date,
    end_date: date,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    department: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: SortField = SortField.DISPLAY_NAME,
    descending: bool = False,
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Paginated per-employee table; rows without a score always sort last. """
    _check_range(start_date, end_date)
    return await service.get_team_productivity(
        requester, start_date, end_date, page=page, page_size=page_size,
        department=department, search=search, sort_by=sort_by, descending=descending,
    )

@router.get("/daily", response_model=DailySummaryResult)
async def read_daily_summary(
    days: int = Query(default=30, ge=1, le=366),
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    return await service.get_daily_summary(requester, days)

@router.get("/departments", response_model=List[str])
async def read_departments(
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    return await service.get_departments(requester)

@router.get("/trend", response_model=List[ProductivityTrendPoint])
async def read_productivity_trend(
    start_date: date,
    end_date: date,
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Average score, productive hours and headcount per day, oldest first. """
    _check_range(start_date, end_date)
    return await service.get_productivity_trend(requester, start_date, end_date)

@router.get("/employee/{email}", response_model=EmployeeProductivity)
async def read_employee_productivity(
    email: str,
    start_date: date,
    end_date: date,
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    _check_range(start_date, end_date)
    detail = await service.get_employee_productivity(requester, email, start_date, end_date)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No active employee with email {email}")
    return detail
