"""
Job Service - job postings, their skills and related names.

Every job handed out carries its company, city and industry names plus its
skill list, so list and detail views share one shape.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.orm import Session

from jobmarket.core.errors import NotFoundError, ValidationError
from jobmarket.core.logging import get_logger
from jobmarket.core.permissions import (
    PUBLISHED,
    Principal,
    authorize_job_create,
    authorize_job_mutation,
    can_view_job,
    require_company,
)
from jobmarket.db.database import Database, utcnow
from jobmarket.db.schema import (
    cities,
    companies,
    industries_level1,
    industries_level2,
    job_positions,
    job_skills,
    skills,
)
from jobmarket.schemas.schemas import JobCreate
from jobmarket.services.reference_service import check_references

logger = get_logger(__name__)


@dataclass
class JobFilter:
    keyword: Optional[str] = None
    city_id: Optional[int] = None
    province_id: Optional[int] = None
    industry_level1_id: Optional[int] = None
    industry_level2_id: Optional[int] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    work_experience_required: Optional[int] = None
    education_required: Optional[str] = None
    page: int = 1
    limit: int = 20


# ============================================================
# SHARED QUERY HELPERS
# ============================================================

def job_query(*extra_columns):
    """SELECT over job_positions with company, city and industry names joined in."""
    return (
        select(
            job_positions,
            companies.c.company_name.label("company_name"),
            cities.c.name.label("city_name"),
            industries_level1.c.name.label("industry_level1_name"),
            industries_level2.c.name.label("industry_level2_name"),
            *extra_columns,
        )
        .select_from(job_positions)
        .join(companies, companies.c.id == job_positions.c.company_id)
        .join(cities, cities.c.id == job_positions.c.city_id)
        .join(industries_level1, industries_level1.c.id == job_positions.c.industry_level1_id)
        .outerjoin(industries_level2, industries_level2.c.id == job_positions.c.industry_level2_id)
    )


def _ref(ref_id, name) -> Optional[dict]:
    if ref_id is None:
        return None
    return {"id": ref_id, "name": name}


def skills_by_job(db: Session, job_ids: Iterable[int]) -> Dict[int, List[dict]]:
    job_ids = list(job_ids)
    grouped: Dict[int, List[dict]] = {job_id: [] for job_id in job_ids}
    if not job_ids:
        return grouped

    rows = db.execute(
        select(
            job_skills.c.job_position_id, job_skills.c.skill_id, job_skills.c.is_required,
            skills.c.name, skills.c.category,
        )
        .join(skills, skills.c.id == job_skills.c.skill_id)
        .where(job_skills.c.job_position_id.in_(job_ids))
        .order_by(job_skills.c.id)
    )
    for r in rows:
        grouped[r.job_position_id].append({
            "skill_id": r.skill_id,
            "name": r.name,
            "category": r.category,
            "is_required": r.is_required,
        })
    return grouped


def load_jobs(db: Session, stmt) -> List[dict]:
    """Run a job_query() statement and assemble job dicts with skills attached."""
    rows = db.execute(stmt).fetchall()
    skill_map = skills_by_job(db, [r.id for r in rows])

    jobs = []
    for r in rows:
        data = dict(r._mapping)
        data["company"] = _ref(data["company_id"], data.pop("company_name"))
        data["city"] = _ref(data["city_id"], data.pop("city_name"))
        data["industry_level1"] = _ref(data["industry_level1_id"], data.pop("industry_level1_name"))
        data["industry_level2"] = _ref(data["industry_level2_id"], data.pop("industry_level2_name"))
        data["skills"] = skill_map.get(r.id, [])
        jobs.append(data)
    return jobs


def _replace_skills(db: Session, job_id: int, skill_ids: List[int]) -> None:
    db.execute(delete(job_skills).where(job_skills.c.job_position_id == job_id))
    now = utcnow()
    for skill_id in dict.fromkeys(skill_ids):
        db.execute(insert(job_skills).values(
            job_position_id=job_id, skill_id=skill_id, is_required=True, created_at=now,
        ))


def _check_salary(salary_min, salary_max) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("salary_min must not exceed salary_max")


class JobService:
    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------
    # Public reads
    # ------------------------------------------------------------

    def list_published(self, filters: JobFilter) -> List[dict]:
        """Published jobs matching every given filter, newest first."""
        stmt = job_query().where(job_positions.c.status == PUBLISHED)

        if filters.city_id is not None:
            stmt = stmt.where(job_positions.c.city_id == filters.city_id)
        elif filters.province_id is not None:
            province_cities = select(cities.c.id).where(cities.c.province_id == filters.province_id)
            stmt = stmt.where(job_positions.c.city_id.in_(province_cities))

        if filters.industry_level1_id is not None:
            stmt = stmt.where(job_positions.c.industry_level1_id == filters.industry_level1_id)
        if filters.industry_level2_id is not None:
            stmt = stmt.where(job_positions.c.industry_level2_id == filters.industry_level2_id)
        if filters.salary_min is not None:
            stmt = stmt.where(job_positions.c.salary_min >= filters.salary_min)
        if filters.salary_max is not None:
            stmt = stmt.where(job_positions.c.salary_max <= filters.salary_max)
        if filters.work_experience_required is not None:
            stmt = stmt.where(job_positions.c.work_experience_required == filters.work_experience_required)
        if filters.education_required:
            stmt = stmt.where(job_positions.c.education_required == filters.education_required)
        if filters.keyword:
            pattern = f"%{filters.keyword}%"
            stmt = stmt.where(or_(
                job_positions.c.position_name.ilike(pattern),
                job_positions.c.description.ilike(pattern),
            ))

        stmt = (
            stmt.order_by(job_positions.c.published_at.desc(), job_positions.c.id.desc())
            .limit(filters.limit)
            .offset((filters.page - 1) * filters.limit)
        )
        with self.db.session() as db:
            return load_jobs(db, stmt)

    def get_job(self, job_id: int, principal: Optional[Principal] = None) -> dict:
        """
        A single job with relations.

        Unpublished jobs are visible only to the owning company; everyone else
        gets the same 404 as for a job that does not exist.
        """
        with self.db.session() as db:
            jobs = load_jobs(db, job_query().where(job_positions.c.id == job_id))
        if not jobs or not can_view_job(principal, jobs[0]["status"], jobs[0]["company_id"]):
            raise NotFoundError("Job")
        return jobs[0]

    # ------------------------------------------------------------
    # Company dashboard
    # ------------------------------------------------------------

    def list_company_jobs(self, principal: Principal, status: Optional[str] = None) -> List[dict]:
        company_id = require_company(principal)
        stmt = job_query().where(job_positions.c.company_id == company_id)
        if status:
            stmt = stmt.where(job_positions.c.status == status)
        stmt = stmt.order_by(job_positions.c.created_at.desc(), job_positions.c.id.desc())
        with self.db.session() as db:
            return load_jobs(db, stmt)

    def get_company_job(self, principal: Principal, job_id: int) -> dict:
        with self.db.session() as db:
            jobs = load_jobs(db, job_query().where(job_positions.c.id == job_id))
        if not jobs:
            raise NotFoundError("Job")
        authorize_job_mutation(principal, jobs[0]["company_id"])
        return jobs[0]

    def create_job(self, principal: Principal, data: JobCreate) -> int:
        """Insert a posting owned by the caller's company. Returns the new job id."""
        company_id = authorize_job_create(principal)
        now = utcnow()
        status = data.status.value

        with self.db.session() as db:
            check_references(
                db,
                city_id=data.city_id,
                industry_level1_id=data.industry_level1_id,
                industry_level2_id=data.industry_level2_id,
                skill_ids=data.skill_ids,
            )
            job_id = db.execute(
                insert(job_positions)
                .values(
                    company_id=company_id,
                    position_name=data.position_name,
                    description=data.description,
                    industry_level1_id=data.industry_level1_id,
                    industry_level2_id=data.industry_level2_id,
                    salary_min=data.salary_min,
                    salary_max=data.salary_max,
                    city_id=data.city_id,
                    work_experience_required=data.work_experience_required,
                    education_required=data.education_required.value if data.education_required else None,
                    position_count=data.position_count,
                    status=status,
                    published_at=now if status == PUBLISHED else None,
                    expired_at=data.expired_at,
                    created_at=now,
                    updated_at=now,
                )
                .returning(job_positions.c.id)
            ).scalar_one()
            _replace_skills(db, job_id, data.skill_ids)

        logger.info("Company %s created job %s (%s)", company_id, job_id, status)
        return job_id

    def update_job(self, principal: Principal, job_id: int, changes: dict) -> dict:
        """Partial update. ``skill_ids``, when present, replaces the whole skill set."""
        changes = dict(changes)
        skill_ids = changes.pop("skill_ids", None)

        with self.db.session() as db:
            current = db.execute(select(job_positions).where(job_positions.c.id == job_id)).fetchone()
            if not current:
                raise NotFoundError("Job")
            authorize_job_mutation(principal, current.company_id)

            _check_salary(
                changes.get("salary_min", current.salary_min),
                changes.get("salary_max", current.salary_max),
            )
            check_references(
                db,
                city_id=changes.get("city_id"),
                industry_level1_id=changes.get("industry_level1_id", current.industry_level1_id),
                industry_level2_id=changes.get("industry_level2_id", current.industry_level2_id),
                skill_ids=skill_ids,
            )

            now = utcnow()
            if changes.get("status") == PUBLISHED and current.published_at is None:
                changes["published_at"] = now
            changes["updated_at"] = now
            db.execute(update(job_positions).where(job_positions.c.id == job_id).values(**changes))
            if skill_ids is not None:
                _replace_skills(db, job_id, skill_ids)

        logger.info("Job %s updated by company %s", job_id, principal.company_id)
        return self.get_company_job(principal, job_id)

    def delete_job(self, principal: Principal, job_id: int) -> None:
        with self.db.session() as db:
            company_id = db.execute(
                select(job_positions.c.company_id).where(job_positions.c.id == job_id)
            ).scalar_one_or_none()
            if company_id is None:
                raise NotFoundError("Job")
            authorize_job_mutation(principal, company_id)
            db.execute(delete(job_positions).where(job_positions.c.id == job_id))

        logger.info("Job %s deleted by company %s", job_id, principal.company_id)
