from __future__ import annotations

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert, text

from conftest import bearer, create_job, register_company, register_talent
from jobmarket.core.errors import ConflictError, StoreUnavailableError
from jobmarket.db.database import Database, degrade_on_store_unavailable
from jobmarket.db.schema import provinces
from jobmarket.services.job_service import JobService


@contextmanager
def unavailable_session():
    raise StoreUnavailableError()
    yield


def test_unreachable_database_is_store_unavailable(tmp_path) -> None:
    database = Database(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite3'}", timeout_seconds=0.1)
    with pytest.raises(StoreUnavailableError):
        with database.session() as db:
            db.execute(text("SELECT 1"))
    assert database.test_connection() is False


def test_integrity_error_becomes_conflict(tmp_path) -> None:
    database = Database(f"sqlite:///{tmp_path / 'db.sqlite3'}")
    database.create_tables()
    with database.session() as db:
        db.execute(insert(provinces).values(name="Guangdong", code="GD"))
    with pytest.raises(ConflictError):
        with database.session() as db:
            db.execute(insert(provinces).values(name="Guangdong", code="GD"))


def test_degrade_decorator_only_swallows_store_unavailable() -> None:
    @degrade_on_store_unavailable(list)
    def flaky():
        raise StoreUnavailableError()

    @degrade_on_store_unavailable(list)
    def broken():
        raise ConflictError("nope")

    assert flaky() == []
    with pytest.raises(ConflictError):
        broken()


@pytest.mark.integration
def test_mutation_during_outage_is_retryable_500(app, client: TestClient, monkeypatch) -> None:
    company = register_company(client)
    talent = register_talent(client)
    job_id = create_job(client, company["access_token"])

    monkeypatch.setattr(app.state.database, "session", unavailable_session)
    resp = client.post("/api/favorites/toggle", json={"job_id": job_id}, headers=bearer(talent["access_token"]))
    assert resp.status_code == 500
    assert resp.json() == {
        "detail": "Service temporarily unavailable, please retry",
        "code": "STORE_UNAVAILABLE",
    }
    assert resp.headers["retry-after"] == "1"

    register = client.post(
        "/api/auth/register",
        json={"phone": "13800000077", "password": "s3cret-pass", "role": "talent", "real_name": "Wang"},
    )
    assert register.status_code == 500
    assert register.json()["code"] == "STORE_UNAVAILABLE"

    detail = client.get(f"/api/jobs/{job_id}")
    assert detail.status_code == 500
    assert detail.headers["retry-after"] == "1"


@pytest.mark.integration
def test_unexpected_error_is_generic_500(app, client: TestClient, monkeypatch) -> None:
    def explode(self, filters):
        raise RuntimeError("connection string postgresql://user:hunter2@db leaked")

    monkeypatch.setattr(JobService, "list_published", explode)
    quiet_client = TestClient(app, raise_server_exceptions=False)
    resp = quiet_client.get("/api/jobs")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error", "code": "INTERNAL_ERROR"}
    assert "hunter2" not in resp.text
