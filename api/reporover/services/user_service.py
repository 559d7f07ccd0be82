"""
User service for registration, sign-in and session token resolution.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional
from sqlmodel import Session, select

from reporover.core.config import settings
from reporover.core.exceptions import AuthenticationError, ConflictError
from reporover.models import User, AuthSession
from reporover.models.types import as_utc, utc_now

logger = logging.getLogger(__name__)


def register_user(session: Session, name: str, email: str, password: str) -> User:
    """
    Create a new user with a salted password hash.

    Raises:
        ConflictError: If the email is already registered
    """
    email = email.strip().lower()
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("Email already exists", "EMAIL_EXISTS")

    user = User(name=name.strip(), email=email, password_hash="", password_salt="")
    user.set_password(password)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(session: Session, email: str, password: str) -> User:
    """
    Look up a user by email and verify the password.

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if not user or not user.verify_password(password):
        raise AuthenticationError("Invalid email or password", "INVALID_CREDENTIALS")
    return user


def create_session(
    session: Session,
    user: User,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> AuthSession:
    """Issue a new bearer token for the user."""
    auth_session = AuthSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=utc_now() + timedelta(hours=settings.session_ttl_hours),
        ip_address=ip_address,
        user_agent=user_agent
    )
    session.add(auth_session)
    session.commit()
    session.refresh(auth_session)
    return auth_session


def resolve_identity(session: Session, token: Optional[str]) -> User:
    """
    Resolve a bearer token to its user.

    Expired sessions are deleted when encountered.

    Raises:
        AuthenticationError: If the token is missing, unknown or expired
    """
    if not token:
        raise AuthenticationError("Authentication required", "AUTH_REQUIRED")

    auth_session = session.exec(select(AuthSession).where(AuthSession.token == token)).first()
    if not auth_session:
        raise AuthenticationError("Authentication required", "AUTH_REQUIRED")

    if as_utc(auth_session.expires_at) <= utc_now():
        session.delete(auth_session)
        session.commit()
        raise AuthenticationError("Session expired", "SESSION_EXPIRED")

    user = session.get(User, auth_session.user_id)
    if not user:
        raise AuthenticationError("Authentication required", "AUTH_REQUIRED")
    return user


def revoke_session(session: Session, token: str) -> None:
    """Delete the session for a token, if any."""
    auth_session = session.exec(select(AuthSession).where(AuthSession.token == token)).first()
    if auth_session:
        session.delete(auth_session)
        session.commit()
