# hr-dashboard/hr_dashboard/services/productivity.py
import logging
from collections import Counter
from datetime import date
from typing import AbstractSet, Dict, Iterable, List, Optional, Tuple

from hr_dashboard.schemas.employee import Employee
from hr_dashboard.schemas.productivity import (
    DailySummaryRow, GroupBy, OrganizationSummary, ProductivityRecord, ProductivityTrendPoint,
    SortField, Summary, TeamProductivityPage,
)
from hr_dashboard.services.directory_index import DirectoryIndex

logger = logging.getLogger(__name__)

UNASSIGNED_DEPARTMENT = "Unassigned"
ORGANIZATION_KEY = "organization"

# (email, date) -> [productive, total] seconds
_DayTotals = Dict[Tuple[str, date], List[float]]


def day_score(productive_seconds: float, total_seconds: float) -> Optional[float]:
    """Share of tracked time that was productive, or None for an empty day."""
    if total_seconds <= 0:
        return None
    return productive_seconds / total_seconds * 100


def _hours(seconds: float) -> float:
    return round(seconds / 3600, 2)


def _collapse_days(records: Iterable[ProductivityRecord], index: DirectoryIndex,
                   scope: Optional[AbstractSet[str]], dropped: Counter) -> _DayTotals:
    days: _DayTotals = {}
    for record in records:
        employee = index.get_by_email(record.email)
        if employee is None:
            dropped["unknown_email"] += 1
            continue
        if not employee.is_active:
            dropped["inactive"] += 1
            continue
        if scope is not None and record.email not in scope:
            dropped["out_of_scope"] += 1
            continue
        totals = days.setdefault((record.email, record.date), [0.0, 0.0])
        totals[0] += record.productive_seconds
        totals[1] += record.total_seconds
    return days


def _fold(key: str, days: Dict[Tuple[str, date], List[float]]) -> Summary:
    scores = [s for s in (day_score(p, t) for p, t in days.values()) if s is not None]
    return Summary(
        key=key,
        employee_count=len({email for email, _ in days}),
        avg_productivity_score=round(sum(scores) / len(scores), 2) if scores else None,
        total_productive_hours=_hours(sum(p for p, _ in days.values())),
        total_hours=_hours(sum(t for _, t in days.values())),
        days_tracked=len({day for _, day in days}),
    )


def _group_key(employee: Employee, group_by: GroupBy) -> str:
    if group_by is GroupBy.EMPLOYEE:
        return employee.email
    if group_by is GroupBy.DEPARTMENT:
        return employee.department or UNASSIGNED_DEPARTMENT
    return ORGANIZATION_KEY


def summarize(
    records: Iterable[ProductivityRecord],
    group_by: GroupBy,
    index: DirectoryIndex,
    scope: Optional[AbstractSet[str]] = None,
    dropped: Optional[Counter] = None,
) -> List[Summary]:
    """
    Fold daily telemetry into per-employee, per-department or organisation rows.

    Records are matched to employees on lowercased email; unmatched records
    and records of inactive employees are counted in ``dropped`` and left
    out. Several records for one employee and
    day are summed before scoring. Days with no tracked time carry no score.
    With a ``scope``, employee rows are emitted for every scoped employee,
    including those with no telemetry.
    """
    counter = dropped if dropped is not None else Counter()
    days = _collapse_days(records, index, scope, counter)
    if counter.get("unknown_email"):
        logger.warning("%d productivity record(s) did not match a directory employee", counter["unknown_email"])

    groups: Dict[str, Dict[Tuple[str, date], List[float]]] = {}
    if group_by is GroupBy.EMPLOYEE and scope is not None:
        for email in scope:
            employee = index.get_by_email(email)
            if employee is not None and employee.is_active:
                groups.setdefault(email, {})
    for (email, day), totals in days.items():
        key = _group_key(index.get_by_email(email), group_by)
        groups.setdefault(key, {})[(email, day)] = totals

    summaries = []
    for key in sorted(groups):
        row = _fold(key, groups[key])
        if group_by is GroupBy.EMPLOYEE:
            employee = index.get_by_email(key)
            row.email = employee.email
            row.display_name = employee.name
            row.department = employee.department
            row.employee_count = 1
        elif group_by is GroupBy.DEPARTMENT:
            row.department = key
            row.display_name = key
        summaries.append(row)
    return summaries


def organization_summary(records: Iterable[ProductivityRecord], index: DirectoryIndex,
                         scope: Optional[AbstractSet[str]] = None,
                         dropped: Optional[Counter] = None) -> OrganizationSummary:
    days = _collapse_days(records, index, scope, dropped if dropped is not None else Counter())
    if not days:
        return OrganizationSummary()
    org = _fold(ORGANIZATION_KEY, days)
    # Percent from raw seconds; the hour totals are already rounded.
    productive = sum(p for p, _ in days.values())
    total = sum(t for _, t in days.values())
    return OrganizationSummary(
        total_employees=org.employee_count,
        avg_productivity_score=org.avg_productivity_score,
        total_productive_hours=org.total_productive_hours,
        total_tracked_hours=org.total_hours,
        productive_percent=round(productive / total * 100, 2) if total > 0 else 0.0,
    )


def productivity_trend(records: Iterable[ProductivityRecord], index: DirectoryIndex,
                       scope: Optional[AbstractSet[str]] = None,
                       dropped: Optional[Counter] = None) -> List[ProductivityTrendPoint]:
    """One point per date, oldest first. Empty days count as tracked but carry no score."""
    days = _collapse_days(records, index, scope, dropped if dropped is not None else Counter())
    by_date: Dict[date, Dict[Tuple[str, date], List[float]]] = {}
    for (email, day), totals in days.items():
        by_date.setdefault(day, {})[(email, day)] = totals

    points = []
    for day in sorted(by_date):
        row = _fold(day.isoformat(), by_date[day])
        points.append(ProductivityTrendPoint(
            date=day,
            avg_productivity_score=row.avg_productivity_score,
            total_productive_hours=row.total_productive_hours,
            employee_count=row.employee_count,
        ))
    return points


def _sort_value(row: Summary, sort_by: SortField):
    if sort_by is SortField.DISPLAY_NAME:
        return (row.display_name or row.key).lower()
    return getattr(row, sort_by.value)


def sort_summaries(rows: Iterable[Summary], sort_by: SortField = SortField.DISPLAY_NAME,
                   descending: bool = False) -> List[Summary]:
    """Stable sort; rows whose sort value is None always come last."""
    rows = list(rows)
    present = [r for r in rows if _sort_value(r, sort_by) is not None]
    missing = [r for r in rows if _sort_value(r, sort_by) is None]
    present.sort(key=lambda r: _sort_value(r, sort_by), reverse=descending)
    return present + missing


def filter_summaries(rows: Iterable[Summary], department: Optional[str] = None,
                     search: Optional[str] = None) -> List[Summary]:
    rows = list(rows)
    if department:
        wanted = department.strip().lower()
        rows = [r for r in rows if (r.department or "").lower() == wanted]
    if search:
        needle = search.strip().lower()
        rows = [
            r for r in rows
            if needle in (r.display_name or "").lower()
            or needle in (r.email or "").lower()
            or needle in (r.department or "").lower()
        ]
    return rows


def paginate(rows: List[Summary], page: int = 1, page_size: int = 20) -> TeamProductivityPage:
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    offset = (page - 1) * page_size
    return TeamProductivityPage(
        data=rows[offset:offset + page_size],
        total=len(rows),
        page=page,
        page_size=page_size,
        has_more=offset + page_size < len(rows),
    )


def daily_summary_rows(records: Iterable[ProductivityRecord]) -> List[DailySummaryRow]:
    rows = []
    for record in records:
        score = day_score(record.productive_seconds, record.total_seconds)
        rows.append(DailySummaryRow(
            date=record.date,
            user_name=record.username,
            productive_hours=record.productive_seconds / 3600,
            unproductive_hours=record.unproductive_seconds / 3600,
            neutral_hours=record.neutral_seconds / 3600,
            total_hours=record.total_seconds / 3600,
            productivity_percent=score if score is not None else 0.0,
        ))
    # Newest day first, then user name.
    rows.sort(key=lambda r: r.user_name.lower())
    rows.sort(key=lambda r: r.date, reverse=True)
    return rows
