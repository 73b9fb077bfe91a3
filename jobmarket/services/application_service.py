"""
Application Service - talents applying to jobs, companies reviewing them.

The unique (talent_id, job_position_id) constraint on applications is what
prevents duplicates under concurrent submission. The existence check before
the insert only produces a friendlier error in the common case.
"""

from typing import List, Optional

from sqlalchemy import insert, select, update

from jobmarket.core.errors import ConflictError, NotFoundError
from jobmarket.core.logging import get_logger
from jobmarket.core.permissions import (
    REVIEW_STATUSES,
    WITHDRAWN,
    Principal,
    authorize_application_create,
    authorize_application_read,
    authorize_application_review,
    authorize_application_withdraw,
    check_review_transition,
    check_withdraw_transition,
    require_company,
    require_talent,
)
from jobmarket.db.database import Database, utcnow
from jobmarket.db.schema import applications, cities, companies, job_positions, provinces, talents

logger = get_logger(__name__)

ALREADY_APPLIED = "You have already applied to this job"

_APPLICANT_COLUMNS = (
    talents.c.real_name.label("talent_real_name"),
    talents.c.gender.label("talent_gender"),
    talents.c.education.label("talent_education"),
    talents.c.work_experience_years.label("talent_work_experience_years"),
    talents.c.major.label("talent_major"),
)


def _application_query(*extra_columns):
    return (
        select(
            applications,
            job_positions.c.position_name,
            job_positions.c.company_id,
            companies.c.company_name,
            *extra_columns,
        )
        .select_from(applications)
        .join(job_positions, job_positions.c.id == applications.c.job_position_id)
        .join(companies, companies.c.id == job_positions.c.company_id)
    )


def _with_job(row) -> dict:
    data = dict(row._mapping)
    return {
        "application": {key: data[key] for key in applications.c.keys()},
        "job": {"id": data["job_position_id"], "name": data["position_name"]},
        "company": {"id": data["company_id"], "name": data["company_name"]},
    }


def _with_applicant(row) -> dict:
    result = _with_job(row)
    result["talent"] = {
        "id": row.talent_id,
        "real_name": row.talent_real_name,
        "gender": row.talent_gender,
        "education": row.talent_education,
        "work_experience_years": row.talent_work_experience_years,
        "major": row.talent_major,
    }
    return result


class ApplicationService:
    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------
    # Talent side
    # ------------------------------------------------------------

    def create_application(self, principal: Principal, job_id: int) -> int:
        """Apply to a published job. Returns the new application id."""
        talent_id = require_talent(principal)
        now = utcnow()
        try:
            with self.db.session() as db:
                job_status = db.execute(
                    select(job_positions.c.status).where(job_positions.c.id == job_id)
                ).scalar_one_or_none()
                if job_status is None:
                    raise NotFoundError("Job")

                already_applied = db.execute(
                    select(applications.c.id).where(
                        applications.c.talent_id == talent_id,
                        applications.c.job_position_id == job_id,
                    )
                ).fetchone() is not None
                authorize_application_create(principal, job_status, already_applied)

                application_id = db.execute(
                    insert(applications)
                    .values(
                        talent_id=talent_id,
                        job_position_id=job_id,
                        status="pending",
                        applied_at=now,
                        created_at=now,
                        updated_at=now,
                    )
                    .returning(applications.c.id)
                ).scalar_one()
        except ConflictError as exc:
            # Lost a race against a concurrent submission of the same pair
            raise ConflictError(ALREADY_APPLIED) from exc

        logger.info("Talent %s applied to job %s (application %s)", talent_id, job_id, application_id)
        return application_id

    def has_applied(self, principal: Optional[Principal], job_id: int) -> bool:
        if principal is None or not principal.is_talent:
            return False
        with self.db.session() as db:
            row = db.execute(
                select(applications.c.id).where(
                    applications.c.talent_id == principal.talent_id,
                    applications.c.job_position_id == job_id,
                )
            ).fetchone()
        return row is not None

    def list_talent_applications(self, principal: Principal, status: Optional[str] = None) -> List[dict]:
        talent_id = require_talent(principal)
        stmt = _application_query().where(applications.c.talent_id == talent_id)
        if status:
            stmt = stmt.where(applications.c.status == status)
        stmt = stmt.order_by(applications.c.applied_at.desc(), applications.c.id.desc())
        with self.db.session() as db:
            return [_with_job(r) for r in db.execute(stmt)]

    def withdraw(self, principal: Principal, application_id: int) -> dict:
        with self.db.session() as db:
            current = db.execute(
                select(applications.c.talent_id, applications.c.status).where(applications.c.id == application_id)
            ).fetchone()
            if not current:
                raise NotFoundError("Application")
            authorize_application_withdraw(principal, current.talent_id)
            check_withdraw_transition(current.status)

            db.execute(
                update(applications)
                .where(applications.c.id == application_id)
                .values(status=WITHDRAWN, updated_at=utcnow())
            )

        logger.info("Application %s withdrawn by talent %s", application_id, principal.talent_id)
        return self.get_application(principal, application_id)

    # ------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------

    def get_application(self, principal: Principal, application_id: int) -> dict:
        """One application, visible to its talent and to the company owning the job."""
        with self.db.session() as db:
            row = db.execute(_application_query().where(applications.c.id == application_id)).fetchone()
        if not row:
            raise NotFoundError("Application")
        authorize_application_read(principal, row.talent_id, row.company_id)
        return _with_job(row)

    # ------------------------------------------------------------
    # Company side
    # ------------------------------------------------------------

    def update_status(
        self,
        principal: Principal,
        application_id: int,
        status: str,
        company_reply: Optional[str] = None,
    ) -> dict:
        """
        Review an application.

        reviewed_at is stamped when the new status is a review outcome and
        reply_at whenever a reply is attached, in the same UPDATE as the status.
        """
        with self.db.session() as db:
            current = db.execute(
                select(applications.c.status, job_positions.c.company_id)
                .join(job_positions, job_positions.c.id == applications.c.job_position_id)
                .where(applications.c.id == application_id)
            ).fetchone()
            if not current:
                raise NotFoundError("Application")
            authorize_application_review(principal, current.company_id)
            check_review_transition(current.status, status)

            now = utcnow()
            values = {"status": status, "updated_at": now}
            if status in REVIEW_STATUSES:
                values["reviewed_at"] = now
            if company_reply:
                values["company_reply"] = company_reply
                values["reply_at"] = now
            db.execute(update(applications).where(applications.c.id == application_id).values(**values))

        logger.info("Application %s set to %s by company %s", application_id, status, principal.company_id)
        return self.get_application(principal, application_id)

    def list_company_resumes(
        self,
        principal: Principal,
        status: Optional[str] = None,
        job_id: Optional[int] = None,
    ) -> List[dict]:
        """Applications received on the caller's jobs, with an applicant summary."""
        company_id = require_company(principal)
        stmt = (
            _application_query(*_APPLICANT_COLUMNS)
            .join(talents, talents.c.id == applications.c.talent_id)
            .where(job_positions.c.company_id == company_id)
        )
        if status:
            stmt = stmt.where(applications.c.status == status)
        if job_id is not None:
            stmt = stmt.where(applications.c.job_position_id == job_id)
        stmt = stmt.order_by(applications.c.applied_at.desc(), applications.c.id.desc())
        with self.db.session() as db:
            return [_with_applicant(r) for r in db.execute(stmt)]

    def get_resume(self, principal: Principal, application_id: int) -> dict:
        """One received application with the applicant's full profile and location."""
        require_company(principal)
        with self.db.session() as db:
            row = db.execute(_application_query().where(applications.c.id == application_id)).fetchone()
            if not row:
                raise NotFoundError("Application")
            authorize_application_read(principal, row.talent_id, row.company_id)

            talent = db.execute(select(talents).where(talents.c.id == row.talent_id)).fetchone()
            location = None
            if talent.city_id is not None:
                location = db.execute(
                    select(cities.c.id, cities.c.name, provinces.c.id.label("province_id"),
                           provinces.c.name.label("province_name"))
                    .join(provinces, provinces.c.id == cities.c.province_id)
                    .where(cities.c.id == talent.city_id)
                ).fetchone()

        result = _with_job(row)
        result["talent"] = dict(talent._mapping)
        result["city"] = {"id": location.id, "name": location.name} if location else None
        result["province"] = {"id": location.province_id, "name": location.province_name} if location else None
        return result
