from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from reporover.schemas.utils import CamelModel


class LoginRequest(CamelModel):
    """Login request schema."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class RegisterRequest(CamelModel):
    """Registration request schema."""
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=8, description="Password (minimum 8 characters)")


class UserResponse(CamelModel):
    """User response schema (without password)."""
    id: int
    name: str
    email: str
    image: Optional[str] = None
    created_at: datetime


class AuthResponse(CamelModel):
    """Authentication response schema."""
    user: UserResponse
    token: str
    expires_at: datetime
    message: str
