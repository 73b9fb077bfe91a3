"""
Reference Data Routes

GET /provinces
GET /cities?province_id=
GET /industries-level1
GET /industries-level2?level1_id=
GET /skills?category=

Public lists. They return [] when the database is unavailable.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobmarket.api.deps import get_reference_service
from jobmarket.schemas.schemas import (
    CityResponse, IndustryLevel1Response, IndustryLevel2Response, ProvinceResponse, SkillResponse,
)
from jobmarket.services.reference_service import ReferenceService

router = APIRouter(tags=["Reference Data"])


@router.get("/provinces", response_model=List[ProvinceResponse])
def list_provinces(reference: ReferenceService = Depends(get_reference_service)):
    return reference.get_provinces()


@router.get("/cities", response_model=List[CityResponse])
def list_cities(
    province_id: Optional[int] = Query(None, gt=0),
    reference: ReferenceService = Depends(get_reference_service),
):
    return reference.get_cities(province_id)


@router.get("/industries-level1", response_model=List[IndustryLevel1Response])
def list_industries_level1(reference: ReferenceService = Depends(get_reference_service)):
    return reference.get_industries_level1()


@router.get("/industries-level2", response_model=List[IndustryLevel2Response])
def list_industries_level2(
    level1_id: Optional[int] = Query(None, gt=0),
    reference: ReferenceService = Depends(get_reference_service),
):
    return reference.get_industries_level2(level1_id)


@router.get("/skills", response_model=List[SkillResponse])
def list_skills(
    category: Optional[str] = Query(None, max_length=50),
    reference: ReferenceService = Depends(get_reference_service),
):
    return reference.get_skills(category)
