# hr-dashboard/hr_dashboard/services/reports.py
"""
Report generation for the dashboard.

Each call fetches its own directory snapshot, resolves the requester's access
first, then scopes the warehouse fetch to the allowed emails. Upstream
failures propagate as ``UpstreamFetchFailure``; there is no partial report.
"""
import logging
from collections import Counter
from datetime import date, timedelta
from typing import AbstractSet, List, Optional, Sequence

from hr_dashboard.core.errors import AccessDenied
from hr_dashboard.schemas.access import AccessContext
from hr_dashboard.schemas.attendance import ComplianceReport, ComplianceTrendPoint
from hr_dashboard.schemas.productivity import (
    DailySummaryResult, EmployeeProductivity, GroupBy, ProductivityReport,
    ProductivityTrendPoint, SortField, TeamProductivityPage,
)
from hr_dashboard.services import attendance, productivity
from hr_dashboard.services.access_resolver import can_view, resolve_access
from hr_dashboard.services.directory_index import DirectoryIndex

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, directory, warehouse, hr_admin_allowlist: AbstractSet[str],
                 location_keywords: Sequence[str] = ()):
        self.directory = directory
        self.warehouse = warehouse
        self.hr_admin_allowlist = frozenset(e.strip().lower() for e in hr_admin_allowlist)
        self.location_keywords = list(location_keywords)

    async def _snapshot(self) -> DirectoryIndex:
        return DirectoryIndex.build(await self.directory.fetch_employee_directory())

    async def _scope(self, requester_email: Optional[str]):
        index = await self._snapshot()
        context = None
        if requester_email and requester_email.strip():
            context = resolve_access(requester_email, index, self.hr_admin_allowlist)
        return index, context

    async def get_access_context(self, requester_email: str) -> AccessContext:
        index = await self._snapshot()
        return resolve_access(requester_email, index, self.hr_admin_allowlist)

    async def get_departments(self, requester_email: Optional[str] = None) -> List[str]:
        """Departments of the employees the requester can see, for filter menus."""
        index, context = await self._scope(requester_email)
        if context is None:
            return index.departments()
        return sorted({
            emp.department for emp in index.active_employees()
            if emp.department and emp.email in context.allowed_emails
        })

    async def get_compliance_report(self, requester_email: Optional[str] = None, weeks_back: int = 4,
                                    today: Optional[date] = None) -> ComplianceReport:
        today = today or date.today()
        start, end = attendance.report_date_range(today, weeks_back)
        index, context = await self._scope(requester_email)

        employees = [
            emp for emp in index.active_employees()
            if emp.email and attendance.matches_location(emp, self.location_keywords)
        ]
        if context is not None:
            employees = [emp for emp in employees if emp.email in context.allowed_emails]

        records, rejected = [], []
        if employees:
            records, rejected = await self.warehouse.fetch_office_attendance_data(
                start, end, [emp.email for emp in employees]
            )

        report = attendance.build_compliance_report(
            employees, records, today, weeks_back,
            supervisor_email=index.supervisor_email,
            access_context=context,
        )
        report.rejected_rows = len(rejected)
        logger.info(
            "Compliance report built for %d employee(s) over %s..%s",
            len(employees), start, end,
            extra={"requester": context.requester_email if context else None},
        )
        return report

    async def get_compliance_trend(self, requester_email: Optional[str] = None, weeks_back: int = 12,
                                   today: Optional[date] = None) -> List[ComplianceTrendPoint]:
        report = await self.get_compliance_report(requester_email, weeks_back, today)
        return attendance.compliance_trend(report)

    async def get_productivity_summary(self, requester_email: Optional[str], start: date, end: date,
                                       group_by: GroupBy = GroupBy.EMPLOYEE) -> ProductivityReport:
        if end < start:
            raise ValueError("end date is before start date")
        index, context = await self._scope(requester_email)
        scope = set(context.allowed_emails) if context else None

        records, rejected = await self.warehouse.fetch_productivity_data(
            start, end, sorted(scope) if scope else None
        )
        dropped: Counter = Counter()
        rows = productivity.summarize(records, group_by, index, scope=scope, dropped=dropped)
        return ProductivityReport(
            start_date=start,
            end_date=end,
            group_by=group_by,
            rows=rows,
            organization=productivity.organization_summary(records, index, scope=scope),
            unmatched_records=dropped["unknown_email"],
            rejected_rows=len(rejected),
            access_context=context,
        )

    async def get_team_productivity(self, requester_email: Optional[str], start: date, end: date,
                                    page: int = 1, page_size: int = 20,
                                    department: Optional[str] = None, search: Optional[str] = None,
                                    sort_by: SortField = SortField.DISPLAY_NAME,
                                    descending: bool = False) -> TeamProductivityPage:
        report = await self.get_productivity_summary(requester_email, start, end, GroupBy.EMPLOYEE)
        rows = productivity.filter_summaries(report.rows, department=department, search=search)
        rows = productivity.sort_summaries(rows, sort_by, descending)
        return productivity.paginate(rows, page, page_size)

    async def get_daily_summary(self, requester_email: Optional[str] = None, days: int = 30,
                                today: Optional[date] = None) -> DailySummaryResult:
        end = today or date.today()
        start = end - timedelta(days=days)
        index, context = await self._scope(requester_email)

        emails = sorted(context.allowed_emails) if context else sorted(index.active_emails())
        records, rejected = [], []
        if emails:
            records, rejected = await self.warehouse.fetch_productivity_data(start, end, emails)
        # Rows are held to the same email set as the query.
        wanted = set(emails)
        rows = productivity.daily_summary_rows(r for r in records if r.email in wanted)
        return DailySummaryResult(
            data=rows,
            access_context=context,
            total_records=len(rows),
            rejected_rows=len(rejected),
        )

    async def get_employee_productivity(self, requester_email: Optional[str], email: str,
                                        start: date, end: date) -> Optional[EmployeeProductivity]:
        """
        Daily series and summary for one employee.

        Raises ``AccessDenied`` when ``email`` is outside the requester's
        allowed set; returns None when no active employee has that email.
        """
        if end < start:
            raise ValueError("end date is before start date")
        index, context = await self._scope(requester_email)
        target = email.strip().lower()
        if context is not None and not can_view(context, target):
            raise AccessDenied(context.requester_email, target)
        employee = index.get_by_email(target)
        if employee is None or not employee.is_active:
            return None

        records, _ = await self.warehouse.fetch_productivity_data(start, end, [target])
        records = [r for r in records if r.email == target]
        rows = productivity.summarize(records, GroupBy.EMPLOYEE, index, scope={target})
        return EmployeeProductivity(
            employee=employee,
            start_date=start,
            end_date=end,
            days=productivity.daily_summary_rows(records),
            summary=rows[0],
        )

    async def get_productivity_trend(self, requester_email: Optional[str], start: date,
                                     end: date) -> List[ProductivityTrendPoint]:
        if end < start:
            raise ValueError("end date is before start date")
        index, context = await self._scope(requester_email)
        scope = set(context.allowed_emails) if context else None
        records, _ = await self.warehouse.fetch_productivity_data(
            start, end, sorted(scope) if scope else None
        )
        return productivity.productivity_trend(records, index, scope=scope)
