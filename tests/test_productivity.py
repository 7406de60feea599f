"""
test_productivity.py — Unit tests for the productivity aggregator.

Tests cover:
  - day scores: empty days excluded from averages, not counted as 0%
  - per-employee, per-department and organisation summaries
  - unmatched emails and inactive employees: dropped from output and counted
  - sorting with null scores last in both directions, filtering, pagination
  - daily summary rows
"""

from collections import Counter
from datetime import date

import pytest

from hr_dashboard.schemas.productivity import GroupBy, SortField, Summary
from hr_dashboard.services.productivity import (
    daily_summary_rows, day_score, filter_summaries, organization_summary,
    paginate, productivity_trend, sort_summaries, summarize,
)
from tests.conftest import productivity_row

D1, D2, D3 = date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)


class TestDayScore:

    def test_score_is_productive_share(self):
        assert day_score(1800, 3600) == 50.0

    def test_empty_day_has_no_score(self):
        assert day_score(0, 0) is None


class TestEmployeeSummary:

    def test_empty_day_does_not_drag_average_down(self, index):
        records = [
            productivity_row("dana@acme.com", D1, 0, 0),
            productivity_row("dana@acme.com", D2, 80, 100),
        ]
        (row,) = summarize(records, GroupBy.EMPLOYEE, index)
        assert row.avg_productivity_score == 80
        assert row.days_tracked == 2

    def test_all_empty_days_give_null_score(self, index):
        (row,) = summarize([productivity_row("dana@acme.com", D1, 0, 0)], GroupBy.EMPLOYEE, index)
        assert row.avg_productivity_score is None

    def test_hours_are_summed_and_rounded(self, index):
        records = [
            productivity_row("dana@acme.com", D1, 3600, 7200),
            productivity_row("dana@acme.com", D2, 1000, 2000),
        ]
        (row,) = summarize(records, GroupBy.EMPLOYEE, index)
        assert row.total_productive_hours == round(4600 / 3600, 2)
        assert row.total_hours == 2.56
        assert row.avg_productivity_score == 50.0

    def test_days_tracked_counts_distinct_dates(self, index):
        records = [
            productivity_row("dana@acme.com", D1, 100, 200),
            productivity_row("dana@acme.com", D1, 300, 400),
            productivity_row("dana@acme.com", D3, 10, 100),
        ]
        (row,) = summarize(records, GroupBy.EMPLOYEE, index)
        assert row.days_tracked == 2
        # D1 collapses to 400/600 before scoring.
        assert row.avg_productivity_score == round((400 / 600 * 100 + 10) / 2, 2)

    def test_row_carries_directory_profile(self, index):
        (row,) = summarize([productivity_row("DANA@acme.com", D1, 1, 2)], GroupBy.EMPLOYEE, index)
        assert row.email == "dana@acme.com"
        assert row.display_name == "Dana"
        assert row.department == "Engineering"

    def test_unmatched_email_is_dropped_and_counted(self, index):
        dropped = Counter()
        records = [
            productivity_row("dana@acme.com", D1, 50, 100),
            productivity_row("stranger@elsewhere.com", D1, 50, 100),
        ]
        rows = summarize(records, GroupBy.EMPLOYEE, index, dropped=dropped)
        assert [r.email for r in rows] == ["dana@acme.com"]
        assert dropped["unknown_email"] == 1

    def test_scope_lists_employees_without_telemetry(self, index):
        scope = {"mo@acme.com", "dana@acme.com", "eli@acme.com"}
        dropped = Counter()
        records = [
            productivity_row("dana@acme.com", D1, 50, 100),
            productivity_row("sam@acme.com", D1, 50, 100),
        ]
        rows = summarize(records, GroupBy.EMPLOYEE, index, scope=scope, dropped=dropped)
        assert sorted(r.email for r in rows) == sorted(scope)
        eli = next(r for r in rows if r.email == "eli@acme.com")
        assert eli.avg_productivity_score is None
        assert eli.days_tracked == 0
        assert dropped["out_of_scope"] == 1


class TestGroupedSummaries:

    def test_department_pools_days_before_averaging(self, index):
        records = [
            productivity_row("dana@acme.com", D1, 90, 100),
            productivity_row("dana@acme.com", D2, 0, 0),
            productivity_row("eli@acme.com", D1, 60, 100),
            productivity_row("eli@acme.com", D2, 30, 100),
            productivity_row("sam@acme.com", D1, 40, 100),
        ]
        rows = {r.key: r for r in summarize(records, GroupBy.DEPARTMENT, index)}
        assert set(rows) == {"Engineering", "Sales"}
        eng = rows["Engineering"]
        assert eng.avg_productivity_score == 60.0
        assert eng.employee_count == 2
        assert eng.days_tracked == 2
        assert rows["Sales"].avg_productivity_score == 40.0

    def test_organization_summary(self, index):
        records = [
            productivity_row("dana@acme.com", D1, 1800, 3600),
            productivity_row("sam@acme.com", D1, 3600, 3600),
            productivity_row("sam@acme.com", D2, 0, 0),
        ]
        org = organization_summary(records, index)
        assert org.total_employees == 2
        assert org.avg_productivity_score == 75.0
        assert org.total_productive_hours == 1.5
        assert org.total_tracked_hours == 2.0
        assert org.productive_percent == 75.0

    def test_organization_summary_without_records(self, index):
        org = organization_summary([], index)
        assert org.total_employees == 0
        assert org.avg_productivity_score is None


class TestSortFilterPaginate:

    @pytest.fixture
    def rows(self):
        return [
            Summary(key="a", display_name="Alice", department="Sales", avg_productivity_score=70, days_tracked=3),
            Summary(key="b", display_name="bob", department="Engineering", avg_productivity_score=None, days_tracked=0),
            Summary(key="c", display_name="Cara", department="Engineering", avg_productivity_score=90, days_tracked=5),
            Summary(key="d", display_name="Dev", department="engineering", avg_productivity_score=None, days_tracked=1),
        ]

    def test_null_scores_last_ascending(self, rows):
        ordered = sort_summaries(rows, SortField.AVG_PRODUCTIVITY_SCORE)
        assert [r.key for r in ordered] == ["a", "c", "b", "d"]

    def test_null_scores_last_descending(self, rows):
        ordered = sort_summaries(rows, SortField.AVG_PRODUCTIVITY_SCORE, descending=True)
        assert [r.key for r in ordered] == ["c", "a", "b", "d"]

    def test_name_sort_is_case_insensitive(self, rows):
        assert [r.key for r in sort_summaries(rows)] == ["a", "b", "c", "d"]
        assert [r.key for r in sort_summaries(rows, descending=True)] == ["d", "c", "b", "a"]

    def test_filter_by_department_ignores_case(self, rows):
        assert [r.key for r in filter_summaries(rows, department="ENGINEERING")] == ["b", "c", "d"]

    def test_search_matches_name_or_department(self, rows):
        assert [r.key for r in filter_summaries(rows, search="car")] == ["c"]
        assert [r.key for r in filter_summaries(rows, search="sales")] == ["a"]

    def test_paginate(self, rows):
        page = paginate(rows, page=2, page_size=3)
        assert [r.key for r in page.data] == ["d"]
        assert page.total == 4
        assert page.has_more is False
        assert paginate(rows, page=1, page_size=3).has_more is True

    def test_paginate_rejects_bad_page(self, rows):
        with pytest.raises(ValueError):
            paginate(rows, page=0)


class TestDailySummaryRows:

    def test_rows_sorted_newest_first_then_name(self):
        records = [
            productivity_row("zed@acme.com", D1, 3600, 7200),
            productivity_row("amy@acme.com", D2, 0, 0),
            productivity_row("amy@acme.com", D1, 7200, 7200, unproductive=0, neutral=0),
        ]
        rows = daily_summary_rows(records)
        assert [(r.date, r.user_name) for r in rows] == [
            (D2, "amy@acme.com"), (D1, "amy@acme.com"), (D1, "zed@acme.com"),
        ]
        assert rows[0].productivity_percent == 0.0
        assert rows[2].productivity_percent == 50.0
        assert rows[2].total_hours == 2.0


class TestInactiveEmployees:

    def test_inactive_employee_records_are_dropped(self, index):
        dropped = Counter()
        records = [
            productivity_row("dana@acme.com", D1, 50, 100),
            productivity_row("ivy@acme.com", D1, 100, 100),
        ]
        rows = summarize(records, GroupBy.EMPLOYEE, index, dropped=dropped)
        assert [r.email for r in rows] == ["dana@acme.com"]
        assert dropped["inactive"] == 1
        assert dropped["unknown_email"] == 0

    def test_inactive_employee_in_scope_gets_no_row(self, index):
        rows = summarize([], GroupBy.EMPLOYEE, index, scope={"ivy@acme.com", "dana@acme.com"})
        assert [r.email for r in rows] == ["dana@acme.com"]

    def test_organization_ignores_inactive(self, index):
        org = organization_summary([
            productivity_row("dana@acme.com", D1, 50, 100),
            productivity_row("ivy@acme.com", D1, 100, 100),
        ], index)
        assert org.total_employees == 1
        assert org.avg_productivity_score == 50.0


class TestOrganizationPercent:

    def test_percent_uses_unrounded_seconds(self, index):
        org = organization_summary([productivity_row("dana@acme.com", D1, 150, 200)], index)
        assert org.total_productive_hours == 0.04
        assert org.total_tracked_hours == 0.06
        assert org.productive_percent == 75.0


class TestProductivityTrend:

    def test_one_point_per_date_oldest_first(self, index):
        records = [
            productivity_row("dana@acme.com", D2, 3600, 7200),
            productivity_row("eli@acme.com", D2, 0, 0),
            productivity_row("dana@acme.com", D1, 1800, 3600),
            productivity_row("sam@acme.com", D1, 3600, 3600),
            productivity_row("ivy@acme.com", D1, 3600, 3600),
        ]
        points = productivity_trend(records, index)
        assert [p.date for p in points] == [D1, D2]
        assert points[0].avg_productivity_score == 75.0
        assert points[0].total_productive_hours == 1.5
        assert points[0].employee_count == 2
        # The empty day still counts the employee but not the score.
        assert points[1].avg_productivity_score == 50.0
        assert points[1].employee_count == 2

    def test_scope_limits_points(self, index):
        points = productivity_trend(
            [productivity_row("sam@acme.com", D1, 1, 2)], index, scope={"dana@acme.com"},
        )
        assert points == []
