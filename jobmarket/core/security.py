"""
Password hashing with bcrypt (passlib).
"""

from passlib.context import CryptContext


class PasswordHasher:
    """Thin wrapper over a bcrypt CryptContext with a configurable cost."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash password with bcrypt."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash. Unparseable hashes count as a mismatch."""
        try:
            return self._context.verify(plain_password, hashed_password)
        except ValueError:
            return False
