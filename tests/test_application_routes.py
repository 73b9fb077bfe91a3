from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from conftest import bearer, create_job, register_company, register_talent
import jobmarket.services.application_service as application_service
from jobmarket.db.schema import applications

pytestmark = pytest.mark.integration


@pytest.fixture
def company(client: TestClient) -> dict:
    return register_company(client)


@pytest.fixture
def talent(client: TestClient) -> dict:
    return register_talent(client)


@pytest.fixture
def job_id(client: TestClient, company: dict) -> int:
    return create_job(client, company["access_token"])


def apply(client: TestClient, token: str, job_id: int):
    return client.post("/api/applications", json={"job_position_id": job_id}, headers=bearer(token))


def count_applications(app) -> int:
    with app.state.database.session() as db:
        return db.execute(select(func.count()).select_from(applications)).scalar_one()


def test_apply_then_duplicate_is_conflict(app, client: TestClient, talent: dict, job_id: int) -> None:
    first = apply(client, talent["access_token"], job_id)
    assert first.status_code == 201
    assert first.json()["application_id"] > 0

    second = apply(client, talent["access_token"], job_id)
    assert second.status_code == 409
    assert second.json() == {"detail": "You have already applied to this job", "code": "CONFLICT"}
    assert count_applications(app) == 1


def test_duplicate_rejected_by_store_constraint(app, client: TestClient, talent: dict, job_id: int, monkeypatch) -> None:
    assert apply(client, talent["access_token"], job_id).status_code == 201

    # A concurrent request that passed the pre-check
    real = application_service.authorize_application_create
    monkeypatch.setattr(
        application_service,
        "authorize_application_create",
        lambda principal, job_status, already_applied: real(principal, job_status, False),
    )
    resp = apply(client, talent["access_token"], job_id)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "You have already applied to this job"
    assert count_applications(app) == 1


def test_draft_job_rejects_applications(client: TestClient, company: dict, talent: dict) -> None:
    draft_id = create_job(client, company["access_token"], status="draft")
    resp = apply(client, talent["access_token"], draft_id)
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_closed_job_rejects_applications(client: TestClient, company: dict, talent: dict, job_id: int) -> None:
    client.put(f"/api/dashboard/jobs/{job_id}", json={"status": "closed"}, headers=bearer(company["access_token"]))
    assert apply(client, talent["access_token"], job_id).status_code == 400


def test_apply_to_missing_job_is_404(client: TestClient, talent: dict) -> None:
    assert apply(client, talent["access_token"], 999).status_code == 404


def test_company_cannot_apply(client: TestClient, company: dict, job_id: int) -> None:
    assert apply(client, company["access_token"], job_id).status_code == 403


def test_apply_requires_authentication(client: TestClient, job_id: int) -> None:
    resp = client.post("/api/applications", json={"job_position_id": job_id})
    assert resp.status_code == 401


def test_apply_rejects_string_job_id(client: TestClient, talent: dict, job_id: int) -> None:
    resp = client.post(
        "/api/applications", json={"job_position_id": str(job_id)}, headers=bearer(talent["access_token"])
    )
    assert resp.status_code == 400


def test_check_applied(client: TestClient, talent: dict, company: dict, job_id: int) -> None:
    url = f"/api/applications/check?job_id={job_id}"
    assert client.get(url).json() == {"has_applied": False}
    assert client.get(url, headers=bearer(talent["access_token"])).json() == {"has_applied": False}

    apply(client, talent["access_token"], job_id)
    assert client.get(url, headers=bearer(talent["access_token"])).json() == {"has_applied": True}
    assert client.get(url, headers=bearer(company["access_token"])).json() == {"has_applied": False}


def test_review_flow_stamps_times(client: TestClient, company: dict, talent: dict, job_id: int) -> None:
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]
    url = f"/api/dashboard/applications/{application_id}"

    reviewed = client.put(url, json={"status": "reviewed"}, headers=bearer(company["access_token"]))
    assert reviewed.status_code == 200
    body = reviewed.json()
    assert body["application"]["status"] == "reviewed"
    assert body["application"]["reviewed_at"] is not None
    assert body["application"]["reply_at"] is None
    assert body["job"] == {"id": job_id, "name": "Backend Engineer"}

    accepted = client.put(
        url, json={"status": "accepted", "company_reply": "Welcome aboard"}, headers=bearer(company["access_token"])
    ).json()["application"]
    assert accepted["status"] == "accepted"
    assert accepted["company_reply"] == "Welcome aboard"
    assert accepted["reply_at"] is not None

    talent_view = client.get(url, headers=bearer(talent["access_token"])).json()["application"]
    assert talent_view["status"] == "accepted"


def test_invalid_transition_is_400(client: TestClient, company: dict, talent: dict, job_id: int) -> None:
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]
    url = f"/api/dashboard/applications/{application_id}"
    client.put(url, json={"status": "rejected"}, headers=bearer(company["access_token"]))

    assert client.put(url, json={"status": "pending"}, headers=bearer(company["access_token"])).status_code == 400
    assert client.put(url, json={"status": "withdrawn"}, headers=bearer(company["access_token"])).status_code == 400
    assert client.put(url, json={"status": "hired"}, headers=bearer(company["access_token"])).status_code == 400


def test_other_company_cannot_review_or_read(client: TestClient, talent: dict, job_id: int) -> None:
    rival = register_company(client, phone="13900000002", company_name="Rival Corp")
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]
    url = f"/api/dashboard/applications/{application_id}"

    assert client.put(url, json={"status": "accepted"}, headers=bearer(rival["access_token"])).status_code == 403
    assert client.get(url, headers=bearer(rival["access_token"])).status_code == 403
    assert client.get(f"/api/dashboard/resumes/{application_id}", headers=bearer(rival["access_token"])).status_code == 403


def test_talent_cannot_review(client: TestClient, talent: dict, job_id: int) -> None:
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]
    resp = client.put(
        f"/api/dashboard/applications/{application_id}", json={"status": "accepted"},
        headers=bearer(talent["access_token"]),
    )
    assert resp.status_code == 403


def test_withdraw_by_owner_only(client: TestClient, company: dict, talent: dict, job_id: int) -> None:
    other = register_talent(client, phone="13800000002", real_name="Han Meimei")
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]
    url = f"/api/dashboard/applications/{application_id}/withdraw"

    assert client.post(url, headers=bearer(other["access_token"])).status_code == 403
    assert client.post(url, headers=bearer(company["access_token"])).status_code == 403

    resp = client.post(url, headers=bearer(talent["access_token"]))
    assert resp.status_code == 200
    assert resp.json()["application"]["status"] == "withdrawn"
    assert client.post(url, headers=bearer(talent["access_token"])).status_code == 400

    review = client.put(
        f"/api/dashboard/applications/{application_id}", json={"status": "reviewed"},
        headers=bearer(company["access_token"]),
    )
    assert review.status_code == 400


def test_talent_lists_own_applications(client: TestClient, company: dict, talent: dict) -> None:
    first = create_job(client, company["access_token"], position_name="Job A")
    second = create_job(client, company["access_token"], position_name="Job B")
    apply(client, talent["access_token"], first)
    app_b = apply(client, talent["access_token"], second).json()["application_id"]
    client.put(f"/api/dashboard/applications/{app_b}", json={"status": "rejected"}, headers=bearer(company["access_token"]))

    listed = client.get("/api/dashboard/applications", headers=bearer(talent["access_token"])).json()
    assert {item["job"]["name"] for item in listed} == {"Job A", "Job B"}
    assert all(item["company"]["name"] == "Acme Tech" for item in listed)

    rejected = client.get(
        "/api/dashboard/applications", params={"status": "rejected"}, headers=bearer(talent["access_token"])
    ).json()
    assert [item["application"]["id"] for item in rejected] == [app_b]

    assert client.get("/api/dashboard/applications", headers=bearer(company["access_token"])).status_code == 403


def test_company_resumes(client: TestClient, company: dict, talent: dict, job_id: int) -> None:
    client.put(
        "/api/profile/talent",
        json={"city_id": 1, "education": "master", "major": "Computer Science"},
        headers=bearer(talent["access_token"]),
    )
    application_id = apply(client, talent["access_token"], job_id).json()["application_id"]

    resumes = client.get("/api/dashboard/resumes", headers=bearer(company["access_token"])).json()
    assert len(resumes) == 1
    assert resumes[0]["talent"]["real_name"] == "Li Lei"
    assert resumes[0]["talent"]["education"] == "master"

    by_other_job = client.get(
        "/api/dashboard/resumes", params={"job_id": job_id + 100}, headers=bearer(company["access_token"])
    ).json()
    assert by_other_job == []

    detail = client.get(f"/api/dashboard/resumes/{application_id}", headers=bearer(company["access_token"])).json()
    assert detail["talent"]["major"] == "Computer Science"
    assert detail["city"] == {"id": 1, "name": "Guangzhou"}
    assert detail["province"] == {"id": 1, "name": "Guangdong"}

    assert client.get("/api/dashboard/resumes", headers=bearer(talent["access_token"])).status_code == 403
