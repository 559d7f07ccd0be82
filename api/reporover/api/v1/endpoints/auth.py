"""
Authentication endpoints.
"""
from fastapi import APIRouter, Depends, Header, Request, status
from sqlmodel import Session
from typing import Optional
import logging

from reporover.core.database import get_session
from reporover.models import User
from reporover.schemas.auth import LoginRequest, RegisterRequest, AuthResponse, UserResponse
from reporover.services.user_service import (
    authenticate_user,
    create_session,
    register_user,
    revoke_session,
)
from reporover.api.v1.endpoints.request_helpers import bearer_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_details(request: Request):
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    request: Request,
    session: Session = Depends(get_session)
):
    """Register a new user and sign them in."""
    user = register_user(session, register_data.name, register_data.email, register_data.password)
    ip_address, user_agent = _client_details(request)
    auth_session = create_session(session, user, ip_address, user_agent)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=auth_session.token,
        expires_at=auth_session.expires_at,
        message="Registration successful"
    )


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: LoginRequest,
    request: Request,
    session: Session = Depends(get_session)
):
    """Login with email and password."""
    user = authenticate_user(session, login_data.email, login_data.password)
    ip_address, user_agent = _client_details(request)
    auth_session = create_session(session, user, ip_address, user_agent)
    logger.info(f"User {user.id} signed in")
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=auth_session.token,
        expires_at=auth_session.expires_at,
        message="Login successful"
    )


@router.post("/logout")
async def logout(
    authorization: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Revoke the caller's session token."""
    revoke_session(session, bearer_token(authorization))
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Return the signed-in user."""
    return UserResponse.model_validate(current_user)
