# hr-dashboard/hr_dashboard/services/attendance.py
"""
Weekly office-attendance compliance.

Raw daily attendance rows are folded into Monday-to-Sunday buckets per
employee. An employee is compliant for a week when at least two distinct days
were spent in the office. Everything here is a pure function of its inputs.
"""
import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from hr_dashboard.schemas.access import AccessContext
from hr_dashboard.schemas.attendance import (
    AttendanceLocation, AttendanceRecord, ComplianceEmployee, ComplianceReport,
    ComplianceSummary, ComplianceTrendPoint, CurrentWeekStatus, DailyAttendance,
    DateRange, EmployeeComplianceRecord, WeeklyCompliance,
)
from hr_dashboard.schemas.employee import Employee

logger = logging.getLogger(__name__)

REQUIRED_OFFICE_DAYS = 2
# Mon-Fri; weekday() 4 is Friday.
LAST_WORKDAY = 4

_STATUS_ORDER = {
    CurrentWeekStatus.NON_COMPLIANT: 0,
    CurrentWeekStatus.AT_RISK: 1,
    CurrentWeekStatus.NO_DATA: 2,
    CurrentWeekStatus.COMPLIANT: 3,
}


def week_start(d: date) -> date:
    """Monday on or before ``d``."""
    return d - timedelta(days=d.weekday())


def week_starts_between(range_start: date, range_end: date) -> List[date]:
    first, last = week_start(range_start), week_start(range_end)
    starts = []
    current = first
    while current <= last:
        starts.append(current)
        current += timedelta(days=7)
    return starts


def percent(part: int, whole: int) -> int:
    """Whole percent, half rounded up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


def _fold_week(email: str, start: date, days: Dict[date, Tuple[AttendanceLocation, float]]) -> WeeklyCompliance:
    office = sum(1 for loc, _ in days.values() if loc is AttendanceLocation.OFFICE)
    remote = sum(1 for loc, _ in days.values() if loc is AttendanceLocation.REMOTE)
    breakdown = [
        DailyAttendance(date=day, location=loc, hours=hours)
        for day, (loc, hours) in sorted(days.items())
    ]
    return WeeklyCompliance(
        employee_email=email,
        week_start=start,
        week_end=start + timedelta(days=6),
        office_days=office,
        remote_days=remote,
        total_days_with_data=len(days),
        is_compliant=office >= REQUIRED_OFFICE_DAYS,
        daily_breakdown=breakdown,
    )


def compute_weekly_compliance(
    records: Iterable[AttendanceRecord],
    range_start: date,
    range_end: date,
    emails: Optional[Sequence[str]] = None,
    dropped: Optional[Counter] = None,
) -> List[WeeklyCompliance]:
    """
    Weekly compliance for every employee and every week touching the range.

    ``emails`` fixes the employees reported on, so employees without any
    attendance still get empty weeks; records for other emails are dropped.
    When omitted, every email seen in ``records`` is reported. Multiple
    records for one day collapse to the one with the most hours (the first
    seen wins a tie). Output is grouped by employee, most recent week first.
    """
    if range_end < range_start:
        raise ValueError(f"range_end {range_end} is before range_start {range_start}")
    records = list(records)
    starts = week_starts_between(range_start, range_end)
    first, last = starts[0], starts[-1]

    if emails is None:
        order = sorted({r.email for r in records})
    else:
        order = list(dict.fromkeys(e.strip().lower() for e in emails))

    buckets: Dict[str, Dict[date, Dict[date, Tuple[AttendanceLocation, float]]]] = {
        email: {start: {} for start in starts} for email in order
    }
    counter = dropped if dropped is not None else Counter()

    for record in records:
        weeks = buckets.get(record.email)
        if weeks is None:
            counter["unknown_email"] += 1
            continue
        start = week_start(record.date)
        if start < first or start > last:
            counter["out_of_range"] += 1
            continue
        days = weeks[start]
        existing = days.get(record.date)
        if existing is None or record.hours_logged > existing[1]:
            days[record.date] = (record.location, record.hours_logged)

    if counter:
        logger.debug("Attendance records dropped during bucketing: %s", dict(counter))

    return [
        _fold_week(email, start, buckets[email][start])
        for email in order
        for start in sorted(buckets[email], reverse=True)
    ]


def group_by_employee(weeks: Iterable[WeeklyCompliance]) -> Dict[str, List[WeeklyCompliance]]:
    grouped: Dict[str, List[WeeklyCompliance]] = {}
    for week in weeks:
        grouped.setdefault(week.employee_email, []).append(week)
    return grouped


def remaining_workdays(today: date) -> int:
    """Weekdays left after ``today`` in its Mon-Fri work week."""
    return max(0, LAST_WORKDAY - today.weekday())


def classify_current_week(week: Optional[WeeklyCompliance], today: date) -> CurrentWeekStatus:
    if week is None or week.total_days_with_data == 0:
        return CurrentWeekStatus.NO_DATA
    if week.office_days >= REQUIRED_OFFICE_DAYS:
        return CurrentWeekStatus.COMPLIANT
    if week.office_days + remaining_workdays(today) >= REQUIRED_OFFICE_DAYS:
        return CurrentWeekStatus.AT_RISK
    return CurrentWeekStatus.NON_COMPLIANT


def report_date_range(today: date, weeks_back: int) -> Tuple[date, date]:
    """Monday ``weeks_back - 1`` weeks ago through this week's Sunday."""
    if weeks_back < 1:
        raise ValueError("weeks_back must be at least 1")
    end = week_start(today) + timedelta(days=6)
    start = end - timedelta(days=weeks_back * 7 - 1)
    return start, end


def matches_location(employee: Employee, keywords: Sequence[str]) -> bool:
    if not keywords:
        return True
    location = (employee.location or "").lower()
    return any(keyword.lower() in location for keyword in keywords)


def build_employee_record(
    employee: Employee,
    weeks: List[WeeklyCompliance],
    today: date,
    supervisor_email: Optional[str] = None,
) -> EmployeeComplianceRecord:
    with_data = [w for w in weeks if w.total_days_with_data > 0]
    compliant = sum(1 for w in with_data if w.is_compliant)
    current_start = week_start(today)
    current = next((w for w in weeks if w.week_start == current_start), None)
    return EmployeeComplianceRecord(
        employee=ComplianceEmployee(
            email=employee.email,
            name=employee.name,
            department=employee.department,
            job_title=employee.job_title,
            supervisor_email=supervisor_email,
        ),
        weeks=weeks,
        total_office_days=sum(w.office_days for w in weeks),
        total_remote_days=sum(w.remote_days for w in weeks),
        total_weeks=len(with_data),
        compliant_weeks=compliant,
        compliance_rate=percent(compliant, len(with_data)),
        current_week_status=classify_current_week(current, today),
    )


def sort_compliance_records(records: Iterable[EmployeeComplianceRecord]) -> List[EmployeeComplianceRecord]:
    """Most concerning first: current-week status, then lowest compliance rate."""
    return sorted(records, key=lambda r: (_STATUS_ORDER[r.current_week_status], r.compliance_rate))


def build_compliance_report(
    employees: Sequence[Employee],
    records: Iterable[AttendanceRecord],
    today: date,
    weeks_back: int,
    supervisor_email: Callable[[Employee], Optional[str]] = lambda emp: None,
    access_context: Optional[AccessContext] = None,
    generated_at: Optional[datetime] = None,
) -> ComplianceReport:
    """Assemble the multi-employee report; ``employees`` must all carry an email."""
    start, end = report_date_range(today, weeks_back)
    emails = [emp.email for emp in employees]
    dropped: Counter = Counter()
    weeks = group_by_employee(compute_weekly_compliance(records, start, end, emails=emails, dropped=dropped))
    if dropped:
        logger.info("Compliance report ignored %d attendance record(s): %s", sum(dropped.values()), dict(dropped))

    rows = [
        build_employee_record(emp, weeks.get(emp.email, []), today, supervisor_email(emp))
        for emp in employees
    ]
    statuses = Counter(r.current_week_status for r in rows)
    total_with_data = sum(r.total_weeks for r in rows)
    total_compliant = sum(r.compliant_weeks for r in rows)

    return ComplianceReport(
        generated_at=generated_at or datetime.now(timezone.utc),
        date_range=DateRange(start_date=start, end_date=end),
        summary=ComplianceSummary(
            total_employees=len(rows),
            employees_with_data=sum(1 for r in rows if r.total_weeks > 0),
            overall_compliance_rate=percent(total_compliant, total_with_data),
            current_week_compliant=statuses[CurrentWeekStatus.COMPLIANT],
            current_week_at_risk=statuses[CurrentWeekStatus.AT_RISK],
            current_week_non_compliant=statuses[CurrentWeekStatus.NON_COMPLIANT],
        ),
        employees=sort_compliance_records(rows),
        access_context=access_context,
    )


def compliance_trend(report: ComplianceReport) -> List[ComplianceTrendPoint]:
    """Per-week compliance across the report's employees, oldest week first."""
    stats: Dict[date, List[int]] = {}
    for row in report.employees:
        for week in row.weeks:
            if week.total_days_with_data == 0:
                continue
            compliant, total = stats.setdefault(week.week_start, [0, 0])
            stats[week.week_start] = [compliant + int(week.is_compliant), total + 1]

    return [
        ComplianceTrendPoint(
            week_start=start,
            compliance_rate=percent(compliant, total),
            compliant_count=compliant,
            non_compliant_count=total - compliant,
            total_employees=total,
        )
        for start, (compliant, total) in sorted(stats.items())
    ]
