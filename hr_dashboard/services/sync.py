# hr-dashboard/hr_dashboard/services/sync.py
"""
Copies the directory and daily productivity into the relational cache.

Each run writes one ``SyncStatus`` row. Rows that cannot be stored (duplicate
emails, telemetry for unknown employees) are counted as failed; rows rejected
by validation upstream are counted as rejected.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_dashboard.db import models
from hr_dashboard.schemas.employee import Employee
from hr_dashboard.schemas.productivity import ProductivityRecord
from hr_dashboard.schemas.sync import SyncResult
from hr_dashboard.services.productivity import day_score

logger = logging.getLogger(__name__)


def _start(db: Session, sync_type: str, source: str) -> models.SyncStatus:
    status = models.SyncStatus(sync_type=sync_type, sync_source=source, status="running")
    db.add(status)
    db.commit()
    db.refresh(status)
    return status


def _finish(db: Session, status: models.SyncStatus, result: SyncResult) -> SyncResult:
    status.status = "completed" if result.success else "failed"
    status.records_processed = result.records_processed
    status.records_created = result.records_created
    status.records_updated = result.records_updated
    status.records_failed = result.records_failed
    status.records_rejected = result.records_rejected
    status.error_message = result.error
    status.completed_at = datetime.now(timezone.utc)
    db.commit()
    result.sync_id = status.id
    return result


def sync_employees(db: Session, employees: Iterable[Employee], rejected: int = 0) -> SyncResult:
    employees = list(employees)
    status = _start(db, "employees", "bamboohr")
    result = SyncResult(sync_type="employees", success=True, records_processed=len(employees),
                        records_rejected=rejected)
    try:
        existing: Dict[str, models.Employee] = {
            row.directory_id: row for row in db.query(models.Employee).all()
        }
        email_owner = {row.email: row.directory_id for row in existing.values() if row.email}

        for emp in employees:
            if emp.email and email_owner.get(emp.email, emp.id) != emp.id:
                logger.warning("Skipping %s: email %s already belongs to %s", emp.id, emp.email, email_owner[emp.email])
                result.records_failed += 1
                continue
            row = existing.get(emp.id)
            if row is None:
                row = models.Employee(directory_id=emp.id)
                db.add(row)
                existing[emp.id] = row
                result.records_created += 1
            else:
                if row.email and row.email != emp.email:
                    email_owner.pop(row.email, None)
                result.records_updated += 1
            row.email = emp.email
            row.display_name = emp.name
            row.job_title = emp.job_title
            row.department = emp.department
            row.location = emp.location
            row.supervisor_directory_id = emp.supervisor_id
            row.is_active = emp.is_active
            if emp.email:
                email_owner[emp.email] = emp.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Employee sync failed")
        result = SyncResult(sync_type="employees", success=False, records_processed=len(employees),
                            records_rejected=rejected, error=str(e))
    return _finish(db, status, result)


def sync_productivity(db: Session, records: Iterable[ProductivityRecord], rejected: int = 0) -> SyncResult:
    records = list(records)
    status = _start(db, "productivity", "warehouse")
    result = SyncResult(sync_type="productivity", success=True, records_processed=len(records),
                        records_rejected=rejected)
    try:
        employee_ids = {
            row.email: row.id for row in db.query(models.Employee).filter(models.Employee.email.isnot(None))
        }
        for record in records:
            employee_id = employee_ids.get(record.email)
            if employee_id is None:
                result.records_failed += 1
                continue
            row = db.query(models.ProductivityDaily).filter(
                models.ProductivityDaily.employee_id == employee_id,
                models.ProductivityDaily.activity_date == record.date,
            ).first()
            if row is None:
                row = models.ProductivityDaily(employee_id=employee_id, activity_date=record.date)
                db.add(row)
                result.records_created += 1
            else:
                result.records_updated += 1
            row.email = record.email
            row.username = record.username
            row.productive_seconds = record.productive_seconds
            row.unproductive_seconds = record.unproductive_seconds
            row.neutral_seconds = record.neutral_seconds
            row.total_seconds = record.total_seconds
            score = day_score(record.productive_seconds, record.total_seconds)
            row.productivity_score = round(score, 2) if score is not None else None
            db.flush()
        db.commit()
        if result.records_failed:
            logger.warning("%d productivity row(s) had no cached employee", result.records_failed)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Productivity sync failed")
        result = SyncResult(sync_type="productivity", success=False, records_processed=len(records),
                            records_rejected=rejected, error=str(e))
    return _finish(db, status, result)


def latest_sync(db: Session, sync_type: str) -> Optional[models.SyncStatus]:
    return (
        db.query(models.SyncStatus)
        .filter(models.SyncStatus.sync_type == sync_type)
        .order_by(models.SyncStatus.id.desc())
        .first()
    )


async def run_sync(db: Session, directory, warehouse, days: int = 7,
                   today: Optional[date] = None) -> List[SyncResult]:
    """Refresh the directory cache, then the last ``days`` of productivity."""
    end = today or date.today()
    employees, bad_rows = await directory.fetch_directory_batch()
    results = [sync_employees(db, employees, rejected=len(bad_rows))]
    records, rejected = await warehouse.fetch_productivity_data(end - timedelta(days=days), end)
    results.append(sync_productivity(db, records, rejected=len(rejected)))
    return results
