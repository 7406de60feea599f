# hr-dashboard/hr_dashboard/services/directory_index.py
import logging
from collections import deque
from typing import Dict, Iterable, List, Optional

from hr_dashboard.schemas.employee import Employee

logger = logging.getLogger(__name__)


class DirectoryIndex:
    """Read-only lookups over one directory snapshot."""

    def __init__(self, by_id: Dict[str, Employee], by_email: Dict[str, Employee],
                 direct_reports: Dict[str, List[Employee]]):
        self.by_id = by_id
        self.by_email = by_email
        self._direct_reports = direct_reports

    @classmethod
    def build(cls, employees: Iterable[Employee]) -> "DirectoryIndex":
        by_id: Dict[str, Employee] = {}
        by_email: Dict[str, Employee] = {}
        direct_reports: Dict[str, List[Employee]] = {}

        for emp in employees:
            if emp.id in by_id:
                logger.warning("Duplicate directory id %s; keeping the first entry", emp.id)
                continue
            by_id[emp.id] = emp
            if emp.email is None:
                continue
            if emp.email in by_email:
                logger.warning("Duplicate directory email %s; keeping id %s", emp.email, by_email[emp.email].id)
                continue
            by_email[emp.email] = emp

        for emp in by_id.values():
            if emp.is_active and emp.supervisor_id:
                direct_reports.setdefault(emp.supervisor_id, []).append(emp)

        return cls(by_id, by_email, direct_reports)

    def direct_reports_of(self, employee_id: str) -> List[Employee]:
        return list(self._direct_reports.get(employee_id, ()))

    def get_by_email(self, email: Optional[str]) -> Optional[Employee]:
        if not email:
            return None
        return self.by_email.get(email.strip().lower())

    def supervisor_email(self, employee: Employee) -> Optional[str]:
        if not employee.supervisor_id:
            return None
        supervisor = self.by_id.get(employee.supervisor_id)
        return supervisor.email if supervisor else None

    def active_employees(self) -> List[Employee]:
        return [emp for emp in self.by_id.values() if emp.is_active]

    def active_emails(self) -> List[str]:
        return [emp.email for emp in self.active_employees() if emp.email]

    def departments(self) -> List[str]:
        return sorted({emp.department for emp in self.active_employees() if emp.department})


def walk_reports(index: DirectoryIndex, root_id: str) -> List[Employee]:
    """Every active employee below ``root_id``, in breadth-first order.

    The supervisor chain comes from the HR system and may loop; the visited
    set ends the walk at the first repeated node and the loop is logged.
    """
    visited = {root_id}
    reached: List[Employee] = []
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        for report in index.direct_reports_of(current):
            if report.id in visited:
                logger.warning(
                    "Reporting cycle detected: %s is reachable again below %s (root %s)",
                    report.id, current, root_id,
                )
                continue
            visited.add(report.id)
            reached.append(report)
            queue.append(report.id)

    return reached
