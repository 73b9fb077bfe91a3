"""
Job Market - Main Application

FastAPI backend with:
- PostgreSQL (any SQLAlchemy URL) for all data
- JWT authentication: short-lived access tokens, rotating refresh tokens
- Role-based authorization for talents and companies

Run: uvicorn jobmarket.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import exc as sa_exc

from jobmarket.api.routes import api_router
from jobmarket.core.config import Settings, get_settings, resolve_jwt_secret
from jobmarket.core.errors import AppError, StoreUnavailableError, ValidationError
from jobmarket.core.logging import configure_logging, get_logger
from jobmarket.core.security import PasswordHasher
from jobmarket.core.tokens import TokenCodec
from jobmarket.db.database import Database
from jobmarket.services.auth_service import AuthService

logger = get_logger(__name__)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def _error_body(exc: AppError) -> dict:
    return {"detail": exc.message, "code": exc.code}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError(_first_validation_message(exc))
        return JSONResponse(status_code=error.status_code, content=_error_body(error))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Configuration is read once here and handed to the collaborators stored on
    app.state. An unusable signing secret raises ConfigurationError, so the
    process refuses to start.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    secret = resolve_jwt_secret(settings)
    database = Database(settings.sqlalchemy_url, timeout_seconds=settings.db_timeout_seconds, echo=settings.debug)
    codec = TokenCodec(
        secret,
        algorithm=settings.jwt_algorithm,
        access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
        refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
    )
    hasher = PasswordHasher(rounds=settings.password_hash_rounds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            database.create_tables()
            purged = AuthService(database, codec, hasher).purge_expired_revocations()
            logger.info("Database ready (%s expired revocations purged)", purged)
        except (sa_exc.SQLAlchemyError, StoreUnavailableError) as e:
            logger.warning("Database initialization failed: %s", e)
        yield
        database.dispose()

    app = FastAPI(
        title="Job Market",
        description="""
        Recruitment marketplace API.

        ## Features
        - **Authentication**: JWT access + refresh tokens for talents and companies
        - **Jobs**: Search published jobs, companies manage their postings
        - **Applications**: Talents apply and withdraw, companies review
        - **Favorites**: Talents bookmark jobs
        - **Reference data**: Provinces, cities, industries, skills
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.token_codec = codec
    app.state.password_hasher = hasher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    def health_check():
        """Detailed health check."""
        connected = database.test_connection()
        return {
            "status": "healthy" if connected else "degraded",
            "database": "connected" if connected else "disconnected",
        }

    return app


app = create_app()
