"""Display hints read from a token without checking its signature.

For rendering only (show a name, decide whether to offer "log in again").
A hint is never proof of identity: the server's token verification is the
only authority, and the server package does not import this module.
"""
from __future__ import annotations

import time
from dataclasses import dataclass

from jose import JWTError, jwt

# Refresh a little before the server would reject the token
EXPIRY_MARGIN_SECONDS = 30


@dataclass(frozen=True)
class TokenDisplayHint:
    user_id: int | None
    role: str | None
    expires_at: int | None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return True
        now = time.time() if now is None else now
        return now >= self.expires_at

    def is_expiring_soon(self, margin: int = EXPIRY_MARGIN_SECONDS, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return self.is_expired(now + margin)


def read_display_hint(token: str | None) -> TokenDisplayHint | None:
    """Unverified claims of a compact JWT, or None if it cannot be parsed."""
    if not token or token.count(".") != 2:
        return None
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None

    try:
        user_id = int(claims["sub"]) if "sub" in claims else None
        expires_at = int(claims["exp"]) if "exp" in claims else None
    except (TypeError, ValueError):
        return None
    role = claims.get("role")
    return TokenDisplayHint(user_id=user_id, role=role if isinstance(role, str) else None, expires_at=expires_at)


def looks_valid(token: str | None, now: float | None = None) -> bool:
    """Structurally a JWT with a subject and an unexpired exp claim."""
    hint = read_display_hint(token)
    return hint is not None and hint.user_id is not None and not hint.is_expired(now)
