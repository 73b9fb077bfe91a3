"""
Service providers for route handlers.

Services are cheap wrappers over the process-wide Database, so one is built
per request from what create_app stored on app.state.
"""

from fastapi import Depends

from jobmarket.core.auth import get_database, get_password_hasher, get_token_codec
from jobmarket.core.security import PasswordHasher
from jobmarket.core.tokens import TokenCodec
from jobmarket.db.database import Database
from jobmarket.services.application_service import ApplicationService
from jobmarket.services.auth_service import AuthService
from jobmarket.services.company_service import CompanyService
from jobmarket.services.favorite_service import FavoriteService
from jobmarket.services.job_service import JobService
from jobmarket.services.reference_service import ReferenceService
from jobmarket.services.user_service import UserService


def get_auth_service(
    db: Database = Depends(get_database),
    codec: TokenCodec = Depends(get_token_codec),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    return AuthService(db, codec, hasher)


def get_user_service(db: Database = Depends(get_database)) -> UserService:
    return UserService(db)


def get_job_service(db: Database = Depends(get_database)) -> JobService:
    return JobService(db)


def get_application_service(db: Database = Depends(get_database)) -> ApplicationService:
    return ApplicationService(db)


def get_favorite_service(db: Database = Depends(get_database)) -> FavoriteService:
    return FavoriteService(db)


def get_company_service(db: Database = Depends(get_database)) -> CompanyService:
    return CompanyService(db)


def get_reference_service(db: Database = Depends(get_database)) -> ReferenceService:
    return ReferenceService(db)
