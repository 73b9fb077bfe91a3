"""
Company Service - the public company directory.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select

from jobmarket.core.errors import NotFoundError
from jobmarket.core.permissions import PUBLISHED
from jobmarket.db.database import Database
from jobmarket.db.schema import cities, companies, industries_level1, industries_level2, job_positions, provinces
from jobmarket.services.job_service import job_query, load_jobs


@dataclass
class CompanyFilter:
    keyword: Optional[str] = None
    city_id: Optional[int] = None
    province_id: Optional[int] = None
    industry_level1_id: Optional[int] = None
    industry_level2_id: Optional[int] = None
    limit: int = 20
    offset: int = 0


def _directory_query():
    job_count = (
        select(func.count(job_positions.c.id))
        .where(job_positions.c.company_id == companies.c.id, job_positions.c.status == PUBLISHED)
        .scalar_subquery()
    )
    return (
        select(
            companies.c.id, companies.c.company_name, companies.c.company_size, companies.c.description,
            companies.c.logo, companies.c.website, companies.c.verification_status,
            companies.c.city_id, cities.c.name.label("city_name"),
            provinces.c.id.label("province_id"), provinces.c.name.label("province_name"),
            companies.c.industry_level1_id, industries_level1.c.name.label("industry_level1_name"),
            companies.c.industry_level2_id, industries_level2.c.name.label("industry_level2_name"),
            job_count.label("job_count"),
        )
        .select_from(companies)
        .join(cities, cities.c.id == companies.c.city_id)
        .join(provinces, provinces.c.id == cities.c.province_id)
        .join(industries_level1, industries_level1.c.id == companies.c.industry_level1_id)
        .outerjoin(industries_level2, industries_level2.c.id == companies.c.industry_level2_id)
    )


def _company_dict(row) -> dict:
    data = dict(row._mapping)

    def ref(id_key, name_key):
        ref_id, name = data.pop(id_key), data.pop(name_key)
        return {"id": ref_id, "name": name} if ref_id is not None else None

    data["city"] = ref("city_id", "city_name")
    data["province"] = ref("province_id", "province_name")
    data["industry_level1"] = ref("industry_level1_id", "industry_level1_name")
    data["industry_level2"] = ref("industry_level2_id", "industry_level2_name")
    data["job_count"] = data["job_count"] or 0
    return data


class CompanyService:
    def __init__(self, db: Database):
        self.db = db

    def list_companies(self, filters: CompanyFilter) -> List[dict]:
        stmt = _directory_query()
        if filters.keyword:
            stmt = stmt.where(companies.c.company_name.ilike(f"%{filters.keyword}%"))
        if filters.city_id is not None:
            stmt = stmt.where(companies.c.city_id == filters.city_id)
        elif filters.province_id is not None:
            stmt = stmt.where(cities.c.province_id == filters.province_id)
        if filters.industry_level1_id is not None:
            stmt = stmt.where(companies.c.industry_level1_id == filters.industry_level1_id)
        if filters.industry_level2_id is not None:
            stmt = stmt.where(companies.c.industry_level2_id == filters.industry_level2_id)

        stmt = stmt.order_by(companies.c.created_at.desc(), companies.c.id.desc())
        stmt = stmt.limit(filters.limit).offset(filters.offset)
        with self.db.session() as db:
            return [_company_dict(r) for r in db.execute(stmt)]

    def get_company(self, company_id: int) -> dict:
        """Directory entry plus the company's published jobs, newest first."""
        with self.db.session() as db:
            row = db.execute(_directory_query().where(companies.c.id == company_id)).fetchone()
            if not row:
                raise NotFoundError("Company")
            jobs = load_jobs(
                db,
                job_query()
                .where(job_positions.c.company_id == company_id, job_positions.c.status == PUBLISHED)
                .order_by(job_positions.c.published_at.desc(), job_positions.c.id.desc()),
            )

        company = _company_dict(row)
        company["jobs"] = jobs
        return company
