from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert

from jobmarket.core.config import Settings
from jobmarket.db.schema import cities, industries_level1, industries_level2, provinces, skills
from jobmarket.main import create_app

TEST_SECRET = "test-signing-secret-0123456789-abcdefghij"
PASSWORD = "s3cret-pass"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'jobmarket.sqlite3'}",
        jwt_secret_key=TEST_SECRET,
        password_hash_rounds=4,
    )


def seed_reference_data(database) -> None:
    with database.session() as db:
        db.execute(insert(provinces), [
            {"id": 1, "name": "Guangdong", "code": "GD"},
            {"id": 2, "name": "Zhejiang", "code": "ZJ"},
        ])
        db.execute(insert(cities), [
            {"id": 1, "name": "Guangzhou", "province_id": 1, "code": "GZ"},
            {"id": 2, "name": "Shenzhen", "province_id": 1, "code": "SZ"},
            {"id": 3, "name": "Hangzhou", "province_id": 2, "code": "HZ"},
        ])
        db.execute(insert(industries_level1), [
            {"id": 1, "name": "Internet", "code": "IT", "description": "Software and online services"},
            {"id": 2, "name": "Finance", "code": "FIN", "description": None},
        ])
        db.execute(insert(industries_level2), [
            {"id": 1, "name": "Software", "industry_level1_id": 1, "code": "IT-SW", "description": None},
            {"id": 2, "name": "Banking", "industry_level1_id": 2, "code": "FIN-BK", "description": None},
        ])
        db.execute(insert(skills), [
            {"id": 1, "name": "Python", "category": "programming", "description": None},
            {"id": 2, "name": "SQL", "category": "database", "description": None},
            {"id": 3, "name": "Communication", "category": "soft", "description": None},
        ])


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        seed_reference_data(app.state.database)
        yield test_client


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_talent(client: TestClient, phone: str = "13800000001", real_name: str = "Li Lei") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"phone": phone, "password": PASSWORD, "role": "talent", "real_name": real_name},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def register_company(client: TestClient, phone: str = "13900000001", company_name: str = "Acme Tech") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={
            "phone": phone,
            "password": PASSWORD,
            "role": "company",
            "company_name": company_name,
            "city_id": 2,
            "industry_level1_id": 1,
            "industry_level2_id": 1,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_job(client: TestClient, token: str, **overrides) -> int:
    payload = {
        "position_name": "Backend Engineer",
        "description": "Build Python services for the hiring platform.",
        "industry_level1_id": 1,
        "industry_level2_id": 1,
        "salary_min": 15000,
        "salary_max": 25000,
        "city_id": 2,
        "work_experience_required": 3,
        "education_required": "bachelor",
        "position_count": 2,
        "skill_ids": [1, 2],
    }
    payload.update(overrides)
    resp = client.post("/api/dashboard/jobs", json=payload, headers=bearer(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["job_id"]
