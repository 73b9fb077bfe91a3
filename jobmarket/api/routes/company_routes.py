"""
Company Routes

GET /companies - Company directory (filters + limit/offset)
GET /companies/{id} - Company with its published jobs
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobmarket.api.deps import get_company_service
from jobmarket.schemas.schemas import CompanyDetailResponse, CompanyListItem
from jobmarket.services.company_service import CompanyFilter, CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyListItem])
def list_companies(
    keyword: Optional[str] = Query(None, max_length=100),
    city_id: Optional[int] = Query(None, gt=0),
    province_id: Optional[int] = Query(None, gt=0),
    industry_level1_id: Optional[int] = Query(None, gt=0),
    industry_level2_id: Optional[int] = Query(None, gt=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    companies: CompanyService = Depends(get_company_service),
):
    filters = CompanyFilter(
        keyword=keyword.strip() if keyword else None,
        city_id=city_id,
        province_id=province_id,
        industry_level1_id=industry_level1_id,
        industry_level2_id=industry_level2_id,
        limit=limit,
        offset=offset,
    )
    return companies.list_companies(filters)


@router.get("/{company_id}", response_model=CompanyDetailResponse)
def get_company(company_id: int, companies: CompanyService = Depends(get_company_service)):
    return companies.get_company(company_id)
