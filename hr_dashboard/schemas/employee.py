# hr-dashboard/hr_dashboard/schemas/employee.py
from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError, field_validator
from typing import Optional

_email_adapter = TypeAdapter(EmailStr)

def normalize_email(value: Optional[str]) -> Optional[str]:
    """Lowercased, trimmed email, or None when the value is not a usable address."""
    if not value or not isinstance(value, str):
        return None
    candidate = value.strip()
    try:
        return _email_adapter.validate_python(candidate).lower()
    except ValidationError:
        return None

class Employee(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    supervisor_id: Optional[str] = None
    is_active: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        # An unusable address is kept as None so the employee stays addressable by id.
        return normalize_email(value)

    @field_validator("supervisor_id", mode="before")
    @classmethod
    def _blank_supervisor(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def name(self) -> str:
        return self.display_name or self.email or self.id

    class Config:
        from_attributes = True
