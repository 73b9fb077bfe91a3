from __future__ import annotations

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from conftest import bearer, create_job, register_company
from jobmarket.core.errors import StoreUnavailableError

pytestmark = pytest.mark.integration


@contextmanager
def unavailable_session():
    raise StoreUnavailableError()
    yield


def test_reference_lists(client: TestClient) -> None:
    assert [p["name"] for p in client.get("/api/provinces").json()] == ["Guangdong", "Zhejiang"]
    assert [c["name"] for c in client.get("/api/cities", params={"province_id": 1}).json()] == ["Guangzhou", "Shenzhen"]
    assert len(client.get("/api/cities").json()) == 3
    assert [i["code"] for i in client.get("/api/industries-level1").json()] == ["IT", "FIN"]
    assert [i["name"] for i in client.get("/api/industries-level2", params={"level1_id": 2}).json()] == ["Banking"]
    assert [s["name"] for s in client.get("/api/skills", params={"category": "programming"}).json()] == ["Python"]


@pytest.mark.parametrize(
    "path", ["/api/provinces", "/api/cities", "/api/industries-level1", "/api/industries-level2", "/api/skills"]
)
def test_reference_lists_degrade_to_empty_when_store_unavailable(app, client: TestClient, monkeypatch, path: str) -> None:
    monkeypatch.setattr(app.state.database, "session", unavailable_session)
    resp = client.get(path)
    assert resp.status_code == 200
    assert resp.json() == []


def test_company_directory(client: TestClient) -> None:
    acme = register_company(client)
    rival = register_company(client, phone="13900000002", company_name="Rival Corp")
    create_job(client, acme["access_token"])
    create_job(client, acme["access_token"], position_name="Draft role", status="draft")
    create_job(client, rival["access_token"])
    create_job(client, rival["access_token"], position_name="Another role")

    listed = client.get("/api/companies").json()
    counts = {c["company_name"]: c["job_count"] for c in listed}
    assert counts == {"Acme Tech": 1, "Rival Corp": 2}
    assert listed[0]["city"] == {"id": 2, "name": "Shenzhen"}
    assert listed[0]["province"] == {"id": 1, "name": "Guangdong"}

    assert [c["company_name"] for c in client.get("/api/companies", params={"keyword": "rival"}).json()] == ["Rival Corp"]
    assert client.get("/api/companies", params={"province_id": 2}).json() == []
    assert len(client.get("/api/companies", params={"limit": 1, "offset": 1}).json()) == 1


def test_company_detail_lists_published_jobs(client: TestClient) -> None:
    acme = register_company(client)
    published = create_job(client, acme["access_token"])
    create_job(client, acme["access_token"], position_name="Draft role", status="draft")
    company_id = client.get(f"/api/jobs/{published}").json()["company_id"]

    detail = client.get(f"/api/companies/{company_id}").json()
    assert detail["company_name"] == "Acme Tech"
    assert detail["job_count"] == 1
    assert [job["id"] for job in detail["jobs"]] == [published]

    assert client.get("/api/companies/999").status_code == 404


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy", "database": "connected"}


def test_health_reports_unavailable_store(app, client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(app.state.database, "session", unavailable_session)
    assert client.get("/health").json() == {"status": "degraded", "database": "disconnected"}
