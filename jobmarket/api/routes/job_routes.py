"""
Job Routes

GET /jobs - Search published jobs (filters + pagination)
GET /jobs/{id} - Job detail (unpublished jobs only for the owning company)

GET /dashboard/jobs - Own jobs (company)
POST /dashboard/jobs - Post a job (company)
GET /dashboard/jobs/{id} - Own job detail
PUT /dashboard/jobs/{id} - Update own job
DELETE /dashboard/jobs/{id} - Delete own job
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobmarket.api.deps import get_job_service
from jobmarket.core.auth import get_current_company, get_optional_principal
from jobmarket.core.permissions import Principal
from jobmarket.schemas.schemas import (
    Education, JobCreate, JobCreatedResponse, JobListResponse, JobResponse, JobStatus, JobUpdate,
    MessageResponse,
)
from jobmarket.services.job_service import JobFilter, JobService

router = APIRouter(tags=["Jobs"])


@router.get("/jobs", response_model=JobListResponse)
def search_jobs(
    keyword: Optional[str] = Query(None, max_length=100),
    city_id: Optional[int] = Query(None, gt=0),
    province_id: Optional[int] = Query(None, gt=0),
    industry_level1_id: Optional[int] = Query(None, gt=0),
    industry_level2_id: Optional[int] = Query(None, gt=0),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    work_experience_required: Optional[int] = Query(None, ge=0),
    education_required: Optional[Education] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    jobs: JobService = Depends(get_job_service),
):
    """
    Search published jobs.

    Filters combine with AND. A province expands to all of its cities unless
    city_id is also given.
    """
    filters = JobFilter(
        keyword=keyword.strip() if keyword else None,
        city_id=city_id,
        province_id=province_id,
        industry_level1_id=industry_level1_id,
        industry_level2_id=industry_level2_id,
        salary_min=salary_min,
        salary_max=salary_max,
        work_experience_required=work_experience_required,
        education_required=education_required.value if education_required else None,
        page=page,
        limit=limit,
    )
    return JobListResponse(jobs=jobs.list_published(filters), page=page, limit=limit)


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(
    job_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.get_job(job_id, principal)


# ============================================================
# COMPANY DASHBOARD
# ============================================================

@router.get("/dashboard/jobs", response_model=List[JobResponse])
def list_own_jobs(
    status: Optional[JobStatus] = Query(None),
    company: Principal = Depends(get_current_company),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.list_company_jobs(company, status.value if status else None)


@router.post("/dashboard/jobs", response_model=JobCreatedResponse, status_code=201)
def create_job(
    data: JobCreate,
    company: Principal = Depends(get_current_company),
    jobs: JobService = Depends(get_job_service),
):
    """Post a job. It is published immediately unless status is "draft"."""
    return JobCreatedResponse(job_id=jobs.create_job(company, data))


@router.get("/dashboard/jobs/{job_id}", response_model=JobResponse)
def get_own_job(
    job_id: int,
    company: Principal = Depends(get_current_company),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.get_company_job(company, job_id)


@router.put("/dashboard/jobs/{job_id}", response_model=JobResponse)
def update_job(
    job_id: int,
    data: JobUpdate,
    company: Principal = Depends(get_current_company),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.update_job(company, job_id, data.changes())


@router.delete("/dashboard/jobs/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: int,
    company: Principal = Depends(get_current_company),
    jobs: JobService = Depends(get_job_service),
):
    jobs.delete_job(company, job_id)
    return MessageResponse(message="Job deleted")
