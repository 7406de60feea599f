# hr-dashboard/hr_dashboard/core/config.py
from typing import List

from pydantic_settings import BaseSettings; from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./hr_dashboard.db"
    JWT_SECRET_KEY: str = "change-me"; JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Emails granted whole-organisation visibility. JSON list in the environment.
    HR_ADMIN_EMAILS: List[str] = []
    # Location substrings scoping the compliance report; empty means everyone.
    COMPLIANCE_LOCATION_KEYWORDS: List[str] = []

    BAMBOOHR_API_KEY: str = ""; BAMBOOHR_SUBDOMAIN: str = ""
    BIGQUERY_PROJECT_ID: str = ""; BIGQUERY_DATASET: str = ""; BIGQUERY_ACCESS_TOKEN: str = ""
    PRODUCTIVITY_TABLE: str = "daily_user_summary"
    ATTENDANCE_TABLE: str = "office_attendance"
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0

    SYNC_API_KEY: str = ""
    LOG_LEVEL: str = "INFO"; LOG_JSON: bool = True

    @property
    def hr_admin_allowlist(self) -> frozenset:
        return frozenset(e.strip().lower() for e in self.HR_ADMIN_EMAILS if e.strip())

settings = Settings()
