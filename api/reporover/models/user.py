"""
User and auth session models.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from reporover.models.types import UTCDateTime, utc_now
import hashlib
import hmac
import secrets

PBKDF2_ITERATIONS = 210_000


class User(SQLModel, table=True):
    """User table - stores user information."""
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)  # Email address, used to sign in
    password_hash: str
    password_salt: str
    image: Optional[str] = Field(default=None)  # Profile image URL
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    @staticmethod
    def hash_password(password: str, salt_hex: Optional[str] = None) -> tuple[str, str]:
        """Salted PBKDF2-SHA256 hash. Returns (hash_hex, salt_hex)."""
        if salt_hex is None:
            salt_hex = secrets.token_hex(16)
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            bytes.fromhex(salt_hex),
            PBKDF2_ITERATIONS,
        )
        return digest.hex(), salt_hex

    def set_password(self, password: str) -> None:
        self.password_hash, self.password_salt = self.hash_password(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        candidate, _ = self.hash_password(password, self.password_salt)
        return hmac.compare_digest(candidate, self.password_hash)


class AuthSession(SQLModel, table=True):
    """AuthSession table - bearer tokens issued at login/registration."""
    __tablename__ = "auth_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    expires_at: datetime = Field(sa_type=UTCDateTime)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
