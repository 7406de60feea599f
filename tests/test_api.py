"""
test_api.py — HTTP surface: auth, routing, error mapping.

Upstream sources are swapped for the in-memory fakes through FastAPI
dependency overrides; the bearer token is a real signed JWT.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hr_dashboard.api import deps
from hr_dashboard.core.config import settings
from hr_dashboard.core.security import create_access_token
from hr_dashboard.db import models, session
from hr_dashboard.main import app
from hr_dashboard.services.reports import ReportService
from tests.conftest import FakeDirectory, FakeWarehouse, attendance, productivity_row


def auth(email):
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


@pytest.fixture
def warehouse():
    today = date.today()
    return FakeWarehouse(
        attendance_records=[attendance("dana@acme.com", today)],
        productivity_records=[productivity_row("dana@acme.com", today, 30, 60)],
    )


@pytest.fixture
def directory(employees):
    return FakeDirectory(employees)


@pytest.fixture
def client(directory, warehouse):
    app.dependency_overrides[deps.get_report_service] = lambda: ReportService(
        directory, warehouse, {"hr@acme.com"}
    )
    app.dependency_overrides[deps.get_directory_client] = lambda: directory
    app.dependency_overrides[deps.get_warehouse_client] = lambda: warehouse
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:

    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_missing_token_is_unauthorized(self, client):
        assert client.get("/api/v1/access/me").status_code == 401

    def test_garbage_token_is_unauthorized(self, client):
        response = client.get("/api/v1/access/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_token_without_subject_is_unauthorized(self, client):
        headers = {"Authorization": f"Bearer {create_access_token({'role': 'x'})}"}
        assert client.get("/api/v1/access/me", headers=headers).status_code == 401


class TestAccess:

    def test_me_uses_token_subject(self, client):
        response = client.get("/api/v1/access/me", headers=auth("Mo@Acme.com"))
        assert response.status_code == 200
        body = response.json()
        assert body["requester_email"] == "mo@acme.com"
        assert body["is_manager"] is True
        assert sorted(body["allowed_emails"]) == ["dana@acme.com", "eli@acme.com", "mo@acme.com", "ola@acme.com"]

    def test_level(self, client):
        response = client.get("/api/v1/access/me/level", headers=auth("hr@acme.com"))
        assert response.json()["access_level"] == "all"


class TestReports:

    def test_compliance_report(self, client, warehouse):
        response = client.get("/api/v1/compliance/report?weeks_back=2", headers=auth("mo@acme.com"))
        assert response.status_code == 200
        body = response.json()
        assert body["summary"]["total_employees"] == 4
        dana = next(e for e in body["employees"] if e["employee"]["email"] == "dana@acme.com")
        assert dana["total_office_days"] == 1

    def test_weeks_back_is_bounded(self, client):
        response = client.get("/api/v1/compliance/report?weeks_back=0", headers=auth("mo@acme.com"))
        assert response.status_code == 422

    def test_productivity_summary(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/summary?start_date={today}&end_date={today}",
            headers=auth("dana@acme.com"),
        )
        assert response.status_code == 200
        (row,) = response.json()["rows"]
        assert row["avg_productivity_score"] == 50.0

    def test_inverted_range_is_bad_request(self, client):
        response = client.get(
            "/api/v1/productivity/summary?start_date=2024-01-10&end_date=2024-01-01",
            headers=auth("dana@acme.com"),
        )
        assert response.status_code == 400

    def test_team_page(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/team?start_date={today}&end_date={today}"
            "&sort_by=avg_productivity_score&descending=true&page_size=2",
            headers=auth("mo@acme.com"),
        )
        body = response.json()
        assert body["data"][0]["email"] == "dana@acme.com"
        assert body["total"] == 4
        assert body["has_more"] is True

    def test_departments(self, client):
        response = client.get("/api/v1/productivity/departments", headers=auth("hr@acme.com"))
        assert response.json() == ["Engineering", "People", "Sales"]

    def test_employee_detail_for_own_report(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/employee/dana@acme.com?start_date={today}&end_date={today}",
            headers=auth("mo@acme.com"),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["employee"]["id"] == "3"
        assert body["summary"]["avg_productivity_score"] == 50.0
        assert len(body["days"]) == 1

    def test_employee_detail_outside_scope_is_forbidden(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/employee/dana@acme.com?start_date={today}&end_date={today}",
            headers=auth("sam@acme.com"),
        )
        assert response.status_code == 403

    def test_employee_detail_for_missing_employee(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/employee/nobody@acme.com?start_date={today}&end_date={today}",
            headers=auth("hr@acme.com"),
        )
        assert response.status_code == 403
        self_response = client.get(
            f"/api/v1/productivity/employee/contractor@vendor.io?start_date={today}&end_date={today}",
            headers=auth("contractor@vendor.io"),
        )
        assert self_response.status_code == 404

    def test_productivity_trend(self, client):
        today = date.today().isoformat()
        response = client.get(
            f"/api/v1/productivity/trend?start_date={today}&end_date={today}",
            headers=auth("mo@acme.com"),
        )
        assert response.status_code == 200
        (point,) = response.json()
        assert point["employee_count"] == 1
        assert point["avg_productivity_score"] == 50.0

    def test_upstream_failure_maps_to_bad_gateway(self, client, directory):
        directory.fail = True
        response = client.get("/api/v1/compliance/report", headers=auth("mo@acme.com"))
        assert response.status_code == 502
        assert response.json()["source"] == "bamboohr"


class TestSyncEndpoints:

    @pytest.fixture
    def db_override(self):
        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        models.Base.metadata.create_all(bind=engine)
        TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        def override_get_db():
            db = TestingSession()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[session.get_db] = override_get_db
        yield
        engine.dispose()

    def test_wrong_key_is_forbidden(self, client, db_override, monkeypatch):
        monkeypatch.setattr(settings, "SYNC_API_KEY", "cron-key")
        response = client.post("/api/v1/sync", headers={"X-API-Key": "guess"})
        assert response.status_code == 403

    def test_unset_key_disables_trigger(self, client, db_override, monkeypatch):
        monkeypatch.setattr(settings, "SYNC_API_KEY", "")
        response = client.post("/api/v1/sync", headers={"X-API-Key": ""})
        assert response.status_code in (401, 403)

    def test_trigger_then_status(self, client, db_override, monkeypatch):
        monkeypatch.setattr(settings, "SYNC_API_KEY", "cron-key")
        headers = {"X-API-Key": "cron-key"}
        assert client.get("/api/v1/sync/status/employees", headers=headers).status_code == 404

        response = client.post("/api/v1/sync?days=3", headers=headers)
        assert response.status_code == 200
        emp, prod = response.json()
        assert emp["sync_type"] == "employees" and emp["success"] is True
        assert prod["records_created"] == 1

        status = client.get("/api/v1/sync/status/productivity", headers=headers).json()
        assert status["status"] == "completed"
        assert status["id"] == prod["sync_id"]
