from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import bearer, create_job, register_company, register_talent

pytestmark = pytest.mark.integration


@pytest.fixture
def company(client: TestClient) -> dict:
    return register_company(client)


@pytest.fixture
def talent(client: TestClient) -> dict:
    return register_talent(client)


def toggle(client: TestClient, token: str, job_id: int) -> bool:
    resp = client.post("/api/favorites/toggle", json={"job_id": job_id}, headers=bearer(token))
    assert resp.status_code == 200, resp.text
    return resp.json()["is_favorite"]


def test_anonymous_favorite_check_is_false_not_401(client: TestClient, company: dict) -> None:
    job_id = create_job(client, company["access_token"])
    resp = client.get(f"/api/favorites?job_id={job_id}")
    assert resp.status_code == 200
    assert resp.json() == {"is_favorite": False}

    expired_looking = client.get(f"/api/favorites?job_id={job_id}", headers=bearer("aaa.bbb.ccc"))
    assert expired_looking.status_code == 200
    assert expired_looking.json() == {"is_favorite": False}


def test_double_toggle_returns_to_original_state(client: TestClient, company: dict, talent: dict) -> None:
    job_id = create_job(client, company["access_token"])
    token = talent["access_token"]
    status_url = f"/api/favorites?job_id={job_id}"

    assert client.get(status_url, headers=bearer(token)).json() == {"is_favorite": False}
    assert toggle(client, token, job_id) is True
    assert client.get(status_url, headers=bearer(token)).json() == {"is_favorite": True}
    assert toggle(client, token, job_id) is False
    assert client.get(status_url, headers=bearer(token)).json() == {"is_favorite": False}


def test_favorites_are_per_talent(client: TestClient, company: dict, talent: dict) -> None:
    other = register_talent(client, phone="13800000002", real_name="Han Meimei")
    job_id = create_job(client, company["access_token"])

    toggle(client, talent["access_token"], job_id)
    assert client.get(f"/api/favorites?job_id={job_id}", headers=bearer(other["access_token"])).json() == {
        "is_favorite": False,
    }


def test_company_cannot_toggle(client: TestClient, company: dict) -> None:
    job_id = create_job(client, company["access_token"])
    resp = client.post("/api/favorites/toggle", json={"job_id": job_id}, headers=bearer(company["access_token"]))
    assert resp.status_code == 403


def test_toggle_missing_job_is_404(client: TestClient, talent: dict) -> None:
    resp = client.post("/api/favorites/toggle", json={"job_id": 404}, headers=bearer(talent["access_token"]))
    assert resp.status_code == 404


def test_favorites_list_shows_published_jobs_newest_first(client: TestClient, company: dict, talent: dict) -> None:
    first = create_job(client, company["access_token"], position_name="First")
    second = create_job(client, company["access_token"], position_name="Second")
    closed = create_job(client, company["access_token"], position_name="Closed later")
    for job_id in (first, second, closed):
        toggle(client, talent["access_token"], job_id)
    client.put(f"/api/dashboard/jobs/{closed}", json={"status": "closed"}, headers=bearer(company["access_token"]))

    listed = client.get("/api/dashboard/favorites", headers=bearer(talent["access_token"])).json()
    assert [job["id"] for job in listed] == [second, first]
    assert listed[0]["favorited_at"]
    assert listed[0]["company"]["name"] == "Acme Tech"
