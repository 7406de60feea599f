# hr-dashboard/hr_dashboard/services/access_resolver.py
"""
Works out which employees' data a requester may see.

HR admins see every active employee with a usable email. Anyone found in the
directory sees themselves plus every active employee below them in the
supervisor forest. Unknown requesters see only their own records.
"""
import logging
from typing import AbstractSet

from hr_dashboard.schemas.access import AccessContext, AccessLevel
from hr_dashboard.services.directory_index import DirectoryIndex, walk_reports

logger = logging.getLogger(__name__)


def resolve_access(requester_email: str, index: DirectoryIndex,
                   hr_admin_allowlist: AbstractSet[str]) -> AccessContext:
    email = requester_email.strip().lower()
    admins = {admin.strip().lower() for admin in hr_admin_allowlist}
    requester = index.get_by_email(email)

    if email in admins:
        allowed = set(index.active_emails())
        allowed.add(email)
        missing = sum(1 for emp in index.active_employees() if not emp.email)
        if missing:
            logger.info("%d active employee(s) have no usable email and are not visible to HR admins", missing)
        direct = len(index.direct_reports_of(requester.id)) if requester else 0
        return AccessContext(
            requester_email=email,
            employee_id=requester.id if requester else None,
            employee_name=requester.name if requester else "HR Admin",
            is_hr_admin=True,
            is_manager=direct > 0,
            allowed_emails=allowed,
            direct_report_count=direct,
            total_report_count=len(allowed - {email}),
        )

    if requester is None:
        return AccessContext(requester_email=email, allowed_emails={email})

    reports = walk_reports(index, requester.id)
    direct = len(index.direct_reports_of(requester.id))
    return AccessContext(
        requester_email=email,
        employee_id=requester.id,
        employee_name=requester.name,
        is_manager=direct > 0,
        allowed_emails={r.email for r in reports if r.email} | {email},
        direct_report_count=direct,
        total_report_count=len(reports),
    )


def access_level(context: AccessContext) -> AccessLevel:
    if context.is_hr_admin:
        return AccessLevel.ALL
    if context.is_manager and context.total_report_count > 0:
        return AccessLevel.TEAM
    return AccessLevel.SELF


def can_view(context: AccessContext, email: str) -> bool:
    return email.strip().lower() in context.allowed_emails
