# hr-dashboard/hr_dashboard/services/warehouse.py
"""
Attendance and productivity adapter over the BigQuery REST API.

Queries go through ``jobs.query`` with named parameters; further result pages
are read with ``getQueryResults``. Rows come back as strings and are parsed
by pydantic models that map warehouse column names onto our records.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import model_validator

from hr_dashboard.core.config import settings
from hr_dashboard.core.errors import UpstreamFetchFailure
from hr_dashboard.schemas.attendance import AttendanceRecord
from hr_dashboard.schemas.productivity import ProductivityRecord
from hr_dashboard.services.validation import Batch, validate_rows

logger = logging.getLogger(__name__)

SOURCE = "warehouse"
BIGQUERY_URL = "https://bigquery.googleapis.com/bigquery/v2"


def _seconds(raw: Dict[str, Any], *columns: str) -> float:
    return sum(float(raw.get(column) or 0) for column in columns)


class DailyUserSummaryRow(ProductivityRecord):
    @model_validator(mode="before")
    @classmethod
    def _from_warehouse(cls, raw: Any):
        if not isinstance(raw, dict):
            return raw
        return {
            "email": raw.get("user_name"),
            "username": raw.get("user_name"),
            "date": raw.get("local_date"),
            "productive_seconds": _seconds(raw, "productive_active_duration_seconds", "productive_passive_duration_seconds"),
            "unproductive_seconds": _seconds(raw, "unproductive_active_duration_seconds", "unproductive_passive_duration_seconds"),
            "neutral_seconds": _seconds(raw, "undefined_active_duration_seconds", "undefined_passive_duration_seconds"),
            "total_seconds": _seconds(raw, "total_duration_seconds"),
        }


class OfficeAttendanceRow(AttendanceRecord):
    @model_validator(mode="before")
    @classmethod
    def _from_warehouse(cls, raw: Any):
        if not isinstance(raw, dict):
            return raw
        return {
            "email": raw.get("email"),
            "date": raw.get("local_date"),
            "location": raw.get("location"),
            "hours_logged": raw.get("total_hours") or 0,
        }


def _scalar_param(name: str, kind: str, value: str) -> dict:
    return {"name": name, "parameterType": {"type": kind}, "parameterValue": {"value": value}}


def _string_array_param(name: str, values: Sequence[str]) -> dict:
    return {
        "name": name,
        "parameterType": {"type": "ARRAY", "arrayType": {"type": "STRING"}},
        "parameterValue": {"arrayValues": [{"value": v} for v in values]},
    }


def _decode_rows(payload: dict) -> List[Dict[str, Any]]:
    fields = [f["name"] for f in payload.get("schema", {}).get("fields", [])]
    rows = []
    for row in payload.get("rows", []):
        cells = row.get("f", [])
        rows.append({name: cell.get("v") for name, cell in zip(fields, cells)})
    return rows


class WarehouseClient:
    def __init__(self, project_id: str, dataset: str, access_token: str,
                 productivity_table: str = "daily_user_summary",
                 attendance_table: str = "office_attendance",
                 timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.project_id = project_id
        self.dataset = dataset
        self.access_token = access_token
        self.productivity_table = productivity_table
        self.attendance_table = attendance_table
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "WarehouseClient":
        return cls(
            settings.BIGQUERY_PROJECT_ID, settings.BIGQUERY_DATASET, settings.BIGQUERY_ACCESS_TOKEN,
            productivity_table=settings.PRODUCTIVITY_TABLE,
            attendance_table=settings.ATTENDANCE_TABLE,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        )

    def _table(self, name: str) -> str:
        return f"`{self.project_id}.{self.dataset}.{name}`"

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs) -> dict:
        try:
            response = await client.request(
                method, url, headers={"Authorization": f"Bearer {self.access_token}"}, **kwargs
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as http_err:
            logger.error("Warehouse returned %s: %s", http_err.response.status_code, http_err.response.text)
            raise UpstreamFetchFailure(SOURCE, f"HTTP {http_err.response.status_code}") from http_err
        except httpx.RequestError as e:
            logger.error("Warehouse request failed: %s", e)
            raise UpstreamFetchFailure(SOURCE, f"request failed: {e}") from e
        except ValueError as e:
            raise UpstreamFetchFailure(SOURCE, "response body is not JSON") from e
        if not isinstance(payload, dict):
            raise UpstreamFetchFailure(SOURCE, "response body is not an object")
        if payload.get("jobComplete") is False:
            raise UpstreamFetchFailure(SOURCE, "query did not complete before the timeout")
        return payload

    async def _query(self, sql: str, params: List[dict]) -> List[Dict[str, Any]]:
        body = {
            "query": sql,
            "useLegacySql": False,
            "parameterMode": "NAMED",
            "queryParameters": params,
            "timeoutMs": int(self.timeout * 1000),
        }
        base = f"{BIGQUERY_URL}/projects/{self.project_id}/queries"
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            payload = await self._send(client, "POST", base, json=body)
            rows = _decode_rows(payload)
            job = payload.get("jobReference", {})
            token = payload.get("pageToken")
            while token:
                page_params = {"pageToken": token}
                if job.get("location"):
                    page_params["location"] = job["location"]
                page = await self._send(client, "GET", f"{base}/{job.get('jobId')}", params=page_params)
                if "schema" not in page:
                    page["schema"] = payload.get("schema", {})
                rows.extend(_decode_rows(page))
                token = page.get("pageToken")
        return rows

    def _range_params(self, start: date, end: date, emails: Optional[Sequence[str]]) -> List[dict]:
        params = [
            _scalar_param("startDate", "DATE", start.isoformat()),
            _scalar_param("endDate", "DATE", end.isoformat()),
        ]
        if emails:
            params.append(_string_array_param("emails", sorted({e.strip().lower() for e in emails})))
        return params

    async def fetch_productivity_data(self, start: date, end: date,
                                      emails: Optional[Sequence[str]] = None) -> Batch:
        sql = f"""
            SELECT local_date, user_name,
                   productive_active_duration_seconds, productive_passive_duration_seconds,
                   unproductive_active_duration_seconds, unproductive_passive_duration_seconds,
                   undefined_active_duration_seconds, undefined_passive_duration_seconds,
                   total_duration_seconds
            FROM {self._table(self.productivity_table)}
            WHERE local_date BETWEEN @startDate AND @endDate
        """
        if emails:
            sql += " AND LOWER(user_name) IN UNNEST(@emails)"
        sql += " ORDER BY local_date DESC, user_name"
        rows = await self._query(sql, self._range_params(start, end, emails))
        return validate_rows(rows, DailyUserSummaryRow, "productivity")

    async def fetch_office_attendance_data(self, start: date, end: date,
                                           emails: Optional[Sequence[str]] = None) -> Batch:
        sql = f"""
            SELECT LOWER(email) AS email, local_date, location, total_hours
            FROM {self._table(self.attendance_table)}
            WHERE local_date BETWEEN @startDate AND @endDate
        """
        if emails:
            sql += " AND LOWER(email) IN UNNEST(@emails)"
        sql += " ORDER BY local_date, email"
        rows = await self._query(sql, self._range_params(start, end, emails))
        return validate_rows(rows, OfficeAttendanceRow, "attendance")
