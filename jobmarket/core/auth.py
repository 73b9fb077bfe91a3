"""
Session resolution - FastAPI dependencies for protected routes.

Provides:
- resolve_session: Authorization header -> verified Identity or None
- get_optional_identity / get_current_identity: anonymous-tolerant and mandatory variants
- get_current_principal / get_current_talent / get_current_company: identity joined with its profile

Failure reasons from the token codec are logged here and never reach the
response body: every unusable credential becomes the same generic 401.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobmarket.core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from jobmarket.core.logging import get_logger
from jobmarket.core.permissions import Principal
from jobmarket.core.security import PasswordHasher
from jobmarket.core.tokens import Identity, Role, TokenCodec, TokenVerificationError, extract_token_from_header
from jobmarket.db.database import Database
from jobmarket.services.user_service import UserService

logger = get_logger(__name__)

# Missing or non-bearer credentials resolve to None instead of a 403
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# PROCESS-WIDE COLLABORATORS (built once by create_app)
# ============================================================

def get_database(request: Request) -> Database:
    return request.app.state.database


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


# ============================================================
# SESSION RESOLVER
# ============================================================

def resolve_session(auth_header: Optional[str], codec: TokenCodec) -> Optional[Identity]:
    """
    Turn an Authorization header value into an Identity.

    Returns None for an absent or malformed header and for any token that
    fails verification.
    """
    token = extract_token_from_header(auth_header)
    if token is None:
        return None

    try:
        claims = codec.verify(token)
    except TokenVerificationError as exc:
        logger.warning("Access token rejected: %s", exc.reason.value)
        return None
    return claims.identity


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[Identity]:
    """Dependency for public routes that personalise when a caller is signed in."""
    if credentials is None:
        return None
    # Scheme is passed through as sent; only "Bearer" is accepted
    return resolve_session(f"{credentials.scheme} {credentials.credentials}", codec)


def get_current_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    """Dependency - require a valid access token."""
    if identity is None:
        raise UnauthenticatedError()
    return identity


# ============================================================
# PROFILE LOOKUP
# ============================================================

def _profile_label(role: Role) -> str:
    return "Talent profile" if role == Role.talent else "Company profile"


def get_current_principal(
    identity: Identity = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Principal:
    """Authenticated caller with a profile row. A missing profile is a 404, not a 401."""
    principal = UserService(db).find_principal(identity)
    if principal is None:
        raise NotFoundError(_profile_label(identity.role))
    return principal


def get_optional_principal(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Database = Depends(get_database),
) -> Optional[Principal]:
    """Like get_current_principal, but anonymous callers and missing profiles give None."""
    if identity is None:
        return None
    return UserService(db).find_principal(identity)


def get_current_talent(
    identity: Identity = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Principal:
    """Dependency - require talent role and a talent profile."""
    if identity.role != Role.talent:
        raise ForbiddenError("Talent accounts only")
    return get_current_principal(identity, db)


def get_current_company(
    identity: Identity = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Principal:
    """Dependency - require company role and a company profile."""
    if identity.role != Role.company:
        raise ForbiddenError("Company accounts only")
    return get_current_principal(identity, db)
