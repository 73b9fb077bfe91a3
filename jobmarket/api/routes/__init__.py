"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobmarket.api.routes.auth_routes import router as auth_router
from jobmarket.api.routes.profile_routes import router as profile_router
from jobmarket.api.routes.job_routes import router as job_router
from jobmarket.api.routes.application_routes import router as application_router
from jobmarket.api.routes.favorite_routes import router as favorite_router
from jobmarket.api.routes.company_routes import router as company_router
from jobmarket.api.routes.reference_routes import router as reference_router
from jobmarket.schemas.schemas import ErrorResponse

# Main API router; every error leaves as {detail, code}
api_router = APIRouter(
    responses={
        status_code: {"model": ErrorResponse}
        for status_code in (400, 401, 403, 404, 409, 500)
    }
)

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(favorite_router)
api_router.include_router(company_router)
api_router.include_router(reference_router)
