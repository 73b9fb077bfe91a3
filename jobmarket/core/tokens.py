"""
Token codec and inbound token transport.

Provides:
- TokenCodec: issue and verify signed JWTs (python-jose, HS256)
- extract_token_from_header: pull a compact JWT out of "Authorization: Bearer <token>"

Two token types are issued. Access tokens are short lived and stateless.
Refresh tokens live longer and carry a jti that the auth service can revoke.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from jobmarket.core.logging import get_logger

logger = get_logger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

_REQUIRED_CLAIMS = ("sub", "role", "typ", "iat", "exp", "jti")


class Role(str, Enum):
    talent = "talent"
    company = "company"


class TokenError(str, Enum):
    MALFORMED = "MALFORMED"
    EXPIRED = "EXPIRED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INVALID = "INVALID"
    UNKNOWN = "UNKNOWN"


class TokenVerificationError(Exception):
    """Raised by TokenCodec.verify. ``reason`` is for server logs only."""

    def __init__(self, reason: TokenError):
        super().__init__(reason.value)
        self.reason = reason


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role


@dataclass(frozen=True)
class TokenClaims:
    identity: Identity
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """Signs and verifies credentials with a process-wide secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def issue(
        self,
        user_id: int,
        role: Role,
        token_type: str = ACCESS_TOKEN,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a signed token for (user_id, role)."""
        if expires_delta is None:
            expires_delta = self.access_ttl if token_type == ACCESS_TOKEN else self.refresh_ttl
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "role": Role(role).value,
            "typ": token_type,
            "iat": now,
            "exp": now + expires_delta,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, expected_type: str = ACCESS_TOKEN) -> TokenClaims:
        """
        Check signature, expiry and claim shape.

        Raises TokenVerificationError whose reason distinguishes malformed,
        expired, bad signature and invalid claims. Callers facing the network
        must collapse all of them into a generic 401.
        """
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            raise TokenVerificationError(TokenError.MALFORMED)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require_" + claim: True for claim in ("exp", "iat", "sub", "jti")},
            )
        except ExpiredSignatureError:
            raise TokenVerificationError(TokenError.EXPIRED)
        except JWTClaimsError:
            raise TokenVerificationError(TokenError.INVALID)
        except JWTError:
            raise TokenVerificationError(TokenError.INVALID_SIGNATURE)
        except Exception:
            logger.exception("Unexpected token verification failure")
            raise TokenVerificationError(TokenError.UNKNOWN)

        return _claims_from_payload(payload, expected_type)


def _claims_from_payload(payload: dict, expected_type: str) -> TokenClaims:
    if any(claim not in payload for claim in _REQUIRED_CLAIMS):
        raise TokenVerificationError(TokenError.INVALID)
    if payload["typ"] != expected_type:
        raise TokenVerificationError(TokenError.INVALID)
    try:
        user_id = int(payload["sub"])
        role = Role(payload["role"])
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError):
        raise TokenVerificationError(TokenError.INVALID)
    if user_id <= 0:
        raise TokenVerificationError(TokenError.INVALID)

    return TokenClaims(
        identity=Identity(user_id=user_id, role=role),
        token_type=payload["typ"],
        jti=str(payload["jti"]),
        issued_at=issued_at,
        expires_at=expires_at,
    )


def extract_token_from_header(auth_header: Optional[str]) -> Optional[str]:
    """
    Return the token from a ``Bearer <token>`` header value.

    Anything else (missing header, other scheme, not three dot-separated
    segments) yields None rather than an error.
    """
    if not auth_header:
        return None
    if not auth_header.startswith("Bearer "):
        return None

    token = auth_header[len("Bearer "):].strip()
    if not token:
        return None
    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        return None
    return token
