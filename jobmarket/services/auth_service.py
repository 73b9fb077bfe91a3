"""
Auth Service - registration, login and the refresh-token lifecycle.

Access tokens are stateless and short lived. Refresh tokens are rotated on
every use and their jti is written to revoked_tokens, so a refresh token can
be spent once and logout invalidates it server-side.
"""

from sqlalchemy import delete, insert, select

from jobmarket.core.errors import ConflictError, UnauthenticatedError
from jobmarket.core.logging import get_logger
from jobmarket.core.security import PasswordHasher
from jobmarket.core.tokens import (
    REFRESH_TOKEN,
    Role,
    TokenCodec,
    TokenVerificationError,
)
from jobmarket.db.database import Database, utcnow
from jobmarket.db.schema import companies, revoked_tokens, talents, users
from jobmarket.schemas.schemas import RegisterRequest
from jobmarket.services.reference_service import check_references

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid phone number or password"


class AuthService:
    def __init__(self, db: Database, codec: TokenCodec, hasher: PasswordHasher):
        self.db = db
        self.codec = codec
        self.hasher = hasher

    def issue_token_pair(self, user_id: int, role: Role) -> dict:
        return {
            "access_token": self.codec.issue(user_id, role),
            "refresh_token": self.codec.issue(user_id, role, token_type=REFRESH_TOKEN),
            "token_type": "bearer",
            "expires_in": int(self.codec.access_ttl.total_seconds()),
            "user_id": user_id,
            "role": Role(role).value,
        }

    def register(self, request: RegisterRequest) -> dict:
        """Create the user and its profile row in one transaction, then sign in."""
        now = utcnow()
        with self.db.session() as db:
            existing = db.execute(select(users.c.id).where(users.c.phone == request.phone)).fetchone()
            if existing:
                raise ConflictError("Phone number already registered")

            check_references(
                db,
                city_id=request.city_id,
                industry_level1_id=request.industry_level1_id,
                industry_level2_id=request.industry_level2_id,
            )

            user_id = db.execute(
                insert(users)
                .values(
                    phone=request.phone,
                    password=self.hasher.hash(request.password),
                    user_type=request.role.value,
                    created_at=now,
                    updated_at=now,
                )
                .returning(users.c.id)
            ).scalar_one()

            if request.role == Role.talent:
                db.execute(insert(talents).values(
                    user_id=user_id,
                    real_name=request.real_name,
                    work_experience_years=0,
                    phone_verified=False,
                    created_at=now,
                    updated_at=now,
                ))
            else:
                db.execute(insert(companies).values(
                    user_id=user_id,
                    company_name=request.company_name,
                    city_id=request.city_id,
                    industry_level1_id=request.industry_level1_id,
                    industry_level2_id=request.industry_level2_id,
                    verification_status="unverified",
                    created_at=now,
                    updated_at=now,
                ))

        logger.info("Registered user %s as %s", user_id, request.role.value)
        return self.issue_token_pair(user_id, request.role)

    def login(self, phone: str, password: str) -> dict:
        with self.db.session() as db:
            row = db.execute(
                select(users.c.id, users.c.password, users.c.user_type).where(users.c.phone == phone)
            ).fetchone()

        # Same message for unknown phone and wrong password
        if not row or not self.hasher.verify(password, row.password):
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        logger.info("User %s logged in", row.id)
        return self.issue_token_pair(row.id, Role(row.user_type))

    def refresh(self, refresh_token: str) -> dict:
        """Spend a refresh token: revoke its jti and issue a fresh pair."""
        claims = self._verify_refresh(refresh_token)
        identity = claims.identity

        try:
            with self.db.session() as db:
                revoked = db.execute(
                    select(revoked_tokens.c.jti).where(revoked_tokens.c.jti == claims.jti)
                ).fetchone()
                if revoked:
                    logger.warning("Reuse of revoked refresh token for user %s", identity.user_id)
                    raise UnauthenticatedError()

                user = db.execute(
                    select(users.c.id, users.c.user_type).where(users.c.id == identity.user_id)
                ).fetchone()
                if not user or user.user_type != identity.role.value:
                    raise UnauthenticatedError()

                db.execute(insert(revoked_tokens).values(
                    jti=claims.jti,
                    user_id=identity.user_id,
                    expires_at=claims.expires_at,
                    revoked_at=utcnow(),
                ))
        except ConflictError:
            # Another request spent the same token first
            logger.warning("Refresh token for user %s spent concurrently", identity.user_id)
            raise UnauthenticatedError()

        return self.issue_token_pair(identity.user_id, identity.role)

    def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Unusable tokens are ignored so logout is idempotent."""
        try:
            claims = self._verify_refresh(refresh_token)
        except UnauthenticatedError:
            return

        with self.db.session() as db:
            exists = db.execute(
                select(revoked_tokens.c.jti).where(revoked_tokens.c.jti == claims.jti)
            ).fetchone()
            if not exists:
                db.execute(insert(revoked_tokens).values(
                    jti=claims.jti,
                    user_id=claims.identity.user_id,
                    expires_at=claims.expires_at,
                    revoked_at=utcnow(),
                ))
        logger.info("User %s logged out", claims.identity.user_id)

    def purge_expired_revocations(self) -> int:
        """Drop denylist rows whose token would have expired anyway."""
        with self.db.session() as db:
            result = db.execute(delete(revoked_tokens).where(revoked_tokens.c.expires_at < utcnow()))
        return result.rowcount or 0

    def _verify_refresh(self, token: str):
        try:
            return self.codec.verify(token, expected_type=REFRESH_TOKEN)
        except TokenVerificationError as exc:
            logger.warning("Refresh token rejected: %s", exc.reason.value)
            raise UnauthenticatedError() from exc
