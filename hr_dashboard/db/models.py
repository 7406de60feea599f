# hr-dashboard/hr_dashboard/db/models.py
from sqlalchemy import ( Column, Integer, String, ForeignKey, Date, DateTime, Float, Boolean, Text, CheckConstraint, UniqueConstraint )
from sqlalchemy.orm import relationship
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class Employee(Base):
    __tablename__ = "hr_employees"
    id = Column(Integer, primary_key=True, index=True)
    directory_id = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
    display_name = Column(String(250))
    job_title = Column(String(200), nullable=True)
    department = Column(String(200), nullable=True, index=True)
    location = Column(String(200), nullable=True)
    supervisor_directory_id = Column(String(50), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    synced_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    productivity = relationship("ProductivityDaily", back_populates="employee")

class ProductivityDaily(Base):
    __tablename__ = "hr_productivity_daily"
    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("hr_employees.id"), nullable=False)
    activity_date = Column(Date, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(255))
    productive_seconds = Column(Float, nullable=False, default=0)
    unproductive_seconds = Column(Float, nullable=False, default=0)
    neutral_seconds = Column(Float, nullable=False, default=0)
    total_seconds = Column(Float, nullable=False, default=0)
    productivity_score = Column(Float, nullable=True)
    synced_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    __table_args__ = ( UniqueConstraint("employee_id", "activity_date", name="uk_productivity_daily"), )
    employee = relationship("Employee", back_populates="productivity")

class SyncStatus(Base):
    __tablename__ = "hr_sync_status"
    id = Column(Integer, primary_key=True, index=True)
    sync_type = Column(String(50), nullable=False)
    sync_source = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="running")
    records_processed = Column(Integer, nullable=False, default=0)
    records_created = Column(Integer, nullable=False, default=0)
    records_updated = Column(Integer, nullable=False, default=0)
    records_failed = Column(Integer, nullable=False, default=0)
    records_rejected = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    __table_args__ = (
        CheckConstraint("sync_type IN ('employees', 'productivity')"),
        CheckConstraint("status IN ('running', 'completed', 'failed')"),
    )
