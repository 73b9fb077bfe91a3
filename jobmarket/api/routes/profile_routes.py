"""
Profile Routes

GET /profile/talent - Get own talent profile
PUT /profile/talent - Update own talent profile
GET /profile/company - Get own company profile
PUT /profile/company - Update own company profile

Updates are partial: omitted fields stay unchanged, fields sent as null are cleared.
"""

from fastapi import APIRouter, Depends

from jobmarket.api.deps import get_user_service
from jobmarket.core.auth import get_current_company, get_current_talent
from jobmarket.core.permissions import Principal
from jobmarket.schemas.schemas import CompanyResponse, CompanyUpdate, TalentResponse, TalentUpdate
from jobmarket.services.user_service import UserService

router = APIRouter(prefix="/profile", tags=["Profiles"])


@router.get("/talent", response_model=TalentResponse)
def get_talent_profile(
    talent: Principal = Depends(get_current_talent),
    users: UserService = Depends(get_user_service),
):
    return users.get_talent_by_user_id(talent.user_id)


@router.put("/talent", response_model=TalentResponse)
def update_talent_profile(
    data: TalentUpdate,
    talent: Principal = Depends(get_current_talent),
    users: UserService = Depends(get_user_service),
):
    return users.update_talent_profile(talent, data.changes())


@router.get("/company", response_model=CompanyResponse)
def get_company_profile(
    company: Principal = Depends(get_current_company),
    users: UserService = Depends(get_user_service),
):
    return users.get_company_by_user_id(company.user_id)


@router.put("/company", response_model=CompanyResponse)
def update_company_profile(
    data: CompanyUpdate,
    company: Principal = Depends(get_current_company),
    users: UserService = Depends(get_user_service),
):
    """city_id is required on every company update."""
    return users.update_company_profile(company, data.changes())
