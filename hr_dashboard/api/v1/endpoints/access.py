# hr-dashboard/hr_dashboard/api/v1/endpoints/access.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hr_dashboard.api.deps import get_report_service
from hr_dashboard.core import security
from hr_dashboard.schemas.access import AccessContext, AccessLevel
from hr_dashboard.services.access_resolver import access_level
from hr_dashboard.services.reports import ReportService

router = APIRouter()

class AccessLevelResponse(BaseModel):
    requester_email: str
    access_level: AccessLevel

@router.get("/me", response_model=AccessContext)
async def read_access_me(
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    """ Returns what the logged-in requester is allowed to see. """
    return await service.get_access_context(requester)

@router.get("/me/level", response_model=AccessLevelResponse)
async def read_access_level(
    requester: str = Depends(security.get_requester_email),
    service: ReportService = Depends(get_report_service)
):
    context = await service.get_access_context(requester)
    return AccessLevelResponse(requester_email=context.requester_email, access_level=access_level(context))
