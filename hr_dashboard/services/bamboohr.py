# hr-dashboard/hr_dashboard/services/bamboohr.py
# Employee directory adapter over the BambooHR REST API.
import logging
from typing import Any, List, Optional

import httpx
from pydantic import model_validator

from hr_dashboard.core.config import settings
from hr_dashboard.core.errors import UpstreamFetchFailure
from hr_dashboard.schemas.employee import Employee
from hr_dashboard.services.directory_index import DirectoryIndex, walk_reports
from hr_dashboard.services.validation import Batch, validate_rows

logger = logging.getLogger(__name__)

SOURCE = "bamboohr"

DIRECTORY_FIELDS = [
    "id", "displayName", "firstName", "lastName", "workEmail", "jobTitle",
    "department", "location", "supervisorId", "supervisorEId", "status",
]


class DirectoryRow(Employee):
    """An employee parsed straight from a BambooHR directory entry."""

    @model_validator(mode="before")
    @classmethod
    def _from_bamboohr(cls, raw: Any):
        if not isinstance(raw, dict):
            return raw
        raw_id = raw.get("id")
        name = raw.get("displayName") or " ".join(
            part for part in (raw.get("firstName"), raw.get("lastName")) if part
        )
        supervisor = raw.get("supervisorEId") or raw.get("supervisorId")
        return {
            "id": str(raw_id) if raw_id is not None else None,
            "email": raw.get("workEmail"),
            "display_name": name or None,
            "department": raw.get("department"),
            "job_title": raw.get("jobTitle"),
            "location": raw.get("location"),
            "supervisor_id": str(supervisor) if supervisor is not None else None,
            "is_active": (raw.get("status") or "").strip().lower() != "inactive",
        }


class BambooHRClient:
    def __init__(self, api_key: str, subdomain: str, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = f"https://api.bamboohr.com/api/gateway.php/{subdomain}/v1"
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "BambooHRClient":
        return cls(settings.BAMBOOHR_API_KEY, settings.BAMBOOHR_SUBDOMAIN,
                   timeout=settings.UPSTREAM_TIMEOUT_SECONDS)

    async def _get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}{endpoint}",
                    params=params,
                    auth=(self.api_key, "x"),
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as http_err:
                logger.error("BambooHR returned %s for %s", http_err.response.status_code, endpoint)
                raise UpstreamFetchFailure(SOURCE, f"HTTP {http_err.response.status_code} for {endpoint}") from http_err
            except httpx.RequestError as e:
                logger.error("BambooHR request failed: %s", e)
                raise UpstreamFetchFailure(SOURCE, f"request failed: {e}") from e
            except ValueError as e:
                raise UpstreamFetchFailure(SOURCE, "response body is not JSON") from e

    async def fetch_directory_batch(self) -> Batch:
        """Full directory snapshot with the rows that failed validation."""
        data = await self._get("/employees/directory", params={"fields": ",".join(DIRECTORY_FIELDS)})
        if not isinstance(data, dict) or not isinstance(data.get("employees"), list):
            raise UpstreamFetchFailure(SOURCE, "directory response has no 'employees' list")
        batch = validate_rows(data["employees"], DirectoryRow, SOURCE)
        logger.info("Fetched %d directory entries (%d rejected)", len(batch.records), len(batch.rejected),
                    extra={"dropped": len(batch.rejected)})
        return batch

    async def fetch_employee_directory(self) -> List[Employee]:
        return (await self.fetch_directory_batch()).records

    async def fetch_reporting_structure(self, manager_id: str) -> List[Employee]:
        """All active direct and indirect reports of ``manager_id``."""
        index = DirectoryIndex.build(await self.fetch_employee_directory())
        return walk_reports(index, manager_id)
