# hr-dashboard/hr_dashboard/api/deps.py
from hr_dashboard.core.config import settings
from hr_dashboard.services.bamboohr import BambooHRClient
from hr_dashboard.services.reports import ReportService
from hr_dashboard.services.warehouse import WarehouseClient

def get_directory_client() -> BambooHRClient:
    return BambooHRClient.from_settings()

def get_warehouse_client() -> WarehouseClient:
    return WarehouseClient.from_settings()

def get_report_service() -> ReportService:
    """ One service per request; nothing is shared between report requests. """
    return ReportService(
        directory=get_directory_client(),
        warehouse=get_warehouse_client(),
        hr_admin_allowlist=settings.hr_admin_allowlist,
        location_keywords=settings.COMPLIANCE_LOCATION_KEYWORDS,
    )
