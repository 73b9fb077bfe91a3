"""
Favorite Routes

GET /favorites?job_id= - Is this job favorited by me (false when anonymous)
POST /favorites/toggle - Favorite / unfavorite a job (talent)
GET /dashboard/favorites - My favorited jobs that are still published
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobmarket.api.deps import get_favorite_service
from jobmarket.core.auth import get_current_talent, get_optional_principal
from jobmarket.core.permissions import Principal
from jobmarket.schemas.schemas import FavoriteJobResponse, FavoriteStatusResponse, FavoriteToggle
from jobmarket.services.favorite_service import FavoriteService

router = APIRouter(tags=["Favorites"])


@router.get("/favorites", response_model=FavoriteStatusResponse)
def favorite_status(
    job_id: int = Query(..., gt=0),
    principal: Optional[Principal] = Depends(get_optional_principal),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    return FavoriteStatusResponse(is_favorite=favorites.is_favorite(principal, job_id))


@router.post("/favorites/toggle", response_model=FavoriteStatusResponse)
def toggle_favorite(
    data: FavoriteToggle,
    talent: Principal = Depends(get_current_talent),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    return FavoriteStatusResponse(is_favorite=favorites.toggle(talent, data.job_id))


@router.get("/dashboard/favorites", response_model=List[FavoriteJobResponse])
def list_favorites(
    talent: Principal = Depends(get_current_talent),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    return favorites.list_favorites(talent)
