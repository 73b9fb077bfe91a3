"""
Authentication Routes

POST /auth/register - Register a talent or company account (returns a token pair)
POST /auth/login - Login with phone and password
POST /auth/refresh - Exchange a refresh token for a new pair
POST /auth/logout - Revoke a refresh token
GET /auth/me - Current user, or null when anonymous
GET /auth/profile - Current user with its talent or company profile
"""

from typing import Optional

from fastapi import APIRouter, Depends

from jobmarket.api.deps import get_auth_service, get_user_service
from jobmarket.core.auth import get_current_identity, get_optional_identity
from jobmarket.core.tokens import Identity
from jobmarket.schemas.schemas import (
    CurrentUserResponse, LoginRequest, MessageResponse, RefreshRequest, RegisterRequest,
    TokenResponse, UserProfileResponse,
)
from jobmarket.services.auth_service import AuthService
from jobmarket.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new account together with its profile.

    Talents must send real_name; companies must send company_name, city_id
    and industry_level1_id.
    """
    return auth.register(request)


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Login and receive an access/refresh token pair.

    Include the access token in requests: Authorization: Bearer <token>
    """
    return auth.login(request.phone, request.password)


@router.post("/refresh", response_model=TokenResponse)
def refresh(request: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    """Rotate: the presented refresh token is revoked and a new pair is issued."""
    return auth.refresh(request.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(request: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    auth.logout(request.refresh_token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=CurrentUserResponse)
def me(
    identity: Optional[Identity] = Depends(get_optional_identity),
    users: UserService = Depends(get_user_service),
):
    """Who is signed in. Anonymous callers get {"user": null} instead of a 401."""
    if identity is None:
        return CurrentUserResponse(user=None)

    name = users.get_display_name(identity.user_id)
    if name is None:
        return CurrentUserResponse(user=None)
    return CurrentUserResponse(user={"id": identity.user_id, "user_name": name, "role": identity.role.value})


@router.get("/profile", response_model=UserProfileResponse)
def get_profile(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
):
    return users.get_profile(identity.user_id)
