"""
conftest.py — Shared pytest fixtures for the HR dashboard test suite.

The core aggregation tests are pure unit tests over a small synthetic
directory. Upstream sources are replaced by in-memory fakes that record the
email scope they were asked for, so tests can check that access is resolved
before data is fetched.

Directory used by most tests (supervisor in brackets):

    1  carla   (-)       HR lead, Montreal
    2  mo      (1)       Engineering manager, Montreal
    3  dana    (2)       Engineering, Montreal
    4  eli     (2)       Engineering, Toronto
    5  sam     (1)       Sales, Laval
    6  ivy     (2)       inactive
    7  (no email) (2)    Engineering, Montreal
    8  ola     (7)       Engineering, Montreal
"""

import os
import sys
from datetime import date
from typing import List, Optional, Sequence

import pytest

_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from hr_dashboard.core.errors import UpstreamFetchFailure  # noqa: E402
from hr_dashboard.schemas.attendance import AttendanceRecord  # noqa: E402
from hr_dashboard.schemas.employee import Employee  # noqa: E402
from hr_dashboard.schemas.productivity import ProductivityRecord  # noqa: E402
from hr_dashboard.services.directory_index import DirectoryIndex  # noqa: E402
from hr_dashboard.services.validation import Batch  # noqa: E402


def make_employee(id, email, supervisor_id=None, department="Engineering",
                  location="Montreal", is_active=True, name=None):
    return Employee(
        id=id,
        email=email,
        display_name=name or (email.split("@")[0].title() if email else f"Employee {id}"),
        department=department,
        job_title="Staff",
        location=location,
        supervisor_id=supervisor_id,
        is_active=is_active,
    )


def attendance(email, day, location="Office", hours=8.0):
    return AttendanceRecord(email=email, date=day, location=location, hours_logged=hours)


def productivity_row(email, day, productive, total, unproductive=0, neutral=0):
    return ProductivityRecord(
        email=email, username=email, date=day,
        productive_seconds=productive, unproductive_seconds=unproductive,
        neutral_seconds=neutral, total_seconds=total,
    )


# ---------------------------------------------------------------------------
# In-memory upstream sources
# ---------------------------------------------------------------------------

class FakeDirectory:
    def __init__(self, employees: List[Employee], rejected=None, fail: bool = False):
        self.employees = employees
        self.rejected = rejected or []
        self.fail = fail
        self.calls = 0

    async def fetch_directory_batch(self) -> Batch:
        self.calls += 1
        if self.fail:
            raise UpstreamFetchFailure("bamboohr", "connection refused")
        return Batch(list(self.employees), list(self.rejected))

    async def fetch_employee_directory(self) -> List[Employee]:
        return (await self.fetch_directory_batch()).records


class FakeWarehouse:
    def __init__(self, attendance_records=None, productivity_records=None,
                 rejected=None, fail: bool = False):
        self.attendance_records = attendance_records or []
        self.productivity_records = productivity_records or []
        self.rejected = rejected or []
        self.fail = fail
        self.requested_emails: List[Optional[Sequence[str]]] = []

    def _scoped(self, records, start, end, emails):
        self.requested_emails.append(list(emails) if emails else None)
        if self.fail:
            raise UpstreamFetchFailure("warehouse", "timeout")
        wanted = {e.lower() for e in emails} if emails else None
        return Batch(
            [r for r in records if start <= r.date <= end and (wanted is None or r.email in wanted)],
            list(self.rejected),
        )

    async def fetch_office_attendance_data(self, start, end, emails=None):
        return self._scoped(self.attendance_records, start, end, emails)

    async def fetch_productivity_data(self, start, end, emails=None):
        return self._scoped(self.productivity_records, start, end, emails)


# ---------------------------------------------------------------------------
# Directory fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def employees():
    return [
        make_employee("1", "carla@acme.com", department="People"),
        make_employee("2", "mo@acme.com", supervisor_id="1"),
        make_employee("3", "dana@acme.com", supervisor_id="2"),
        make_employee("4", "eli@acme.com", supervisor_id="2", location="Toronto"),
        make_employee("5", "sam@acme.com", supervisor_id="1", department="Sales", location="Laval"),
        make_employee("6", "ivy@acme.com", supervisor_id="2", is_active=False),
        make_employee("7", None, supervisor_id="2"),
        make_employee("8", "ola@acme.com", supervisor_id="7"),
    ]


@pytest.fixture
def index(employees):
    return DirectoryIndex.build(employees)


@pytest.fixture
def hr_admins():
    return frozenset({"hr@acme.com"})


@pytest.fixture
def week_of_jan_1():
    """Mon 2024-01-01 .. Sun 2024-01-07."""
    return date(2024, 1, 1), date(2024, 1, 7)
