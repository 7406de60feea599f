# hr-dashboard/hr_dashboard/api/v1/endpoints/compliance.py
from fastapi import APIRouter, Depends, Query
from typing import List

from hr_dashboard.api.deps import get_report_service
from hr_dashboard.core import security
from hr_dashboard.schemas.attendance import ComplianceReport, ComplianceTrendPoint
from hr_dashboard.services.reports import ReportService

router = APIRouter()

@router.get("/report", response_model=ComplianceReport)
async def read_compliance_report(
    weeks_back: int = Query(default=4, ge=1, le=52),
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Weekly office-attendance compliance for everyone the requester can see. """
    return await service.get_compliance_report(requester, weeks_back)

@router.get("/trend", response_model=List[ComplianceTrendPoint])
async def read_compliance_trend(
    weeks_back: int = Query(default=12, ge=1, le=52),
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Compliance rate per week, oldest first. """
    return await service.get_compliance_trend(requester, weeks_back)
