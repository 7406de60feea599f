# hr-dashboard/hr_dashboard/api/v1/api.py
from fastapi import APIRouter
from hr_dashboard.api.v1.endpoints import access, compliance, productivity, sync

api_router = APIRouter()

api_router.include_router(access.router, prefix="/access", tags=["Access"])
api_router.include_router(compliance.router, prefix="/compliance", tags=["Compliance"])
api_router.include_router(productivity.router, prefix="/productivity", tags=["Productivity"])
api_router.include_router(sync.router, prefix="/sync", tags=["Sync"])
