"""
Application Routes

POST /applications - Apply to a published job (talent)
GET /applications/check?job_id= - Has the caller applied (false when anonymous)

GET /dashboard/applications - Own applications (talent)
GET /dashboard/applications/{id} - One application (its talent or the job's company)
PUT /dashboard/applications/{id} - Review an application (company)
POST /dashboard/applications/{id}/withdraw - Withdraw (talent)

GET /dashboard/resumes - Applications received (company)
GET /dashboard/resumes/{id} - Received application with full applicant profile
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobmarket.api.deps import get_application_service
from jobmarket.core.auth import (
    get_current_company, get_current_principal, get_current_talent, get_optional_principal,
)
from jobmarket.core.permissions import Principal
from jobmarket.schemas.schemas import (
    ApplicationCreate, ApplicationCreatedResponse, ApplicationStatus, ApplicationStatusUpdate,
    ApplicationWithApplicant, ApplicationWithJob, HasAppliedResponse, ResumeDetailResponse,
)
from jobmarket.services.application_service import ApplicationService

router = APIRouter(tags=["Applications"])


@router.post("/applications", response_model=ApplicationCreatedResponse, status_code=201)
def apply(
    data: ApplicationCreate,
    talent: Principal = Depends(get_current_talent),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Apply to a job.

    404 when the job does not exist, 400 when it is not published,
    409 when the caller already applied.
    """
    return ApplicationCreatedResponse(application_id=service.create_application(talent, data.job_position_id))


@router.get("/applications/check", response_model=HasAppliedResponse)
def check_applied(
    job_id: int = Query(..., gt=0),
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: ApplicationService = Depends(get_application_service),
):
    return HasAppliedResponse(has_applied=service.has_applied(principal, job_id))


# ============================================================
# DASHBOARD
# ============================================================

@router.get("/dashboard/applications", response_model=List[ApplicationWithJob])
def list_own_applications(
    status: Optional[ApplicationStatus] = Query(None),
    talent: Principal = Depends(get_current_talent),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_talent_applications(talent, status.value if status else None)


@router.get("/dashboard/applications/{application_id}", response_model=ApplicationWithJob)
def get_application(
    application_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ApplicationService = Depends(get_application_service),
):
    return service.get_application(principal, application_id)


@router.put("/dashboard/applications/{application_id}", response_model=ApplicationWithJob)
def review_application(
    application_id: int,
    data: ApplicationStatusUpdate,
    company: Principal = Depends(get_current_company),
    service: ApplicationService = Depends(get_application_service),
):
    """Change status and optionally attach a reply. Only the company owning the job may do this."""
    return service.update_status(company, application_id, data.status.value, data.company_reply)


@router.post("/dashboard/applications/{application_id}/withdraw", response_model=ApplicationWithJob)
def withdraw_application(
    application_id: int,
    talent: Principal = Depends(get_current_talent),
    service: ApplicationService = Depends(get_application_service),
):
    return service.withdraw(talent, application_id)


@router.get("/dashboard/resumes", response_model=List[ApplicationWithApplicant])
def list_resumes(
    status: Optional[ApplicationStatus] = Query(None),
    job_id: Optional[int] = Query(None, gt=0),
    company: Principal = Depends(get_current_company),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_company_resumes(company, status.value if status else None, job_id)


@router.get("/dashboard/resumes/{application_id}", response_model=ResumeDetailResponse)
def get_resume(
    application_id: int,
    company: Principal = Depends(get_current_company),
    service: ApplicationService = Depends(get_application_service),
):
    return service.get_resume(company, application_id)
