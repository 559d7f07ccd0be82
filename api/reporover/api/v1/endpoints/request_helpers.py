"""
Request-level helpers shared by the endpoint modules: identity, id parsing,
pagination and ownership guards.
"""
import json
import logging
from typing import Optional

from fastapi import Depends, Header, Query, Request
from sqlmodel import Session

from reporover.core.database import get_session
from reporover.core.exceptions import AuthorizationError, ValidationError
from reporover.models import User
from reporover.services.record_service import Pagination, clamp_pagination
from reporover.services.user_service import resolve_identity

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("userId", "user_id")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session)
) -> User:
    """Resolve the caller from the bearer token; 401 if absent or invalid."""
    return resolve_identity(session, bearer_token(authorization))


def parse_id(value: Optional[str], code: str = "INVALID_ID", label: str = "id") -> Optional[int]:
    """
    Parse an id query parameter.

    Returns None when the parameter is absent.

    Raises:
        ValidationError: If the value is not a positive integer
    """
    if value is None:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {label} is required", code)
    if parsed <= 0:
        raise ValidationError(f"Valid {label} is required", code)
    return parsed


def require_id(value: Optional[str], code: str = "INVALID_ID", label: str = "id") -> int:
    parsed = parse_id(value, code, label)
    if parsed is None:
        raise ValidationError(f"Valid {label} is required", code)
    return parsed


def get_pagination(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None)
) -> Pagination:
    """Pagination dependency; non-integer values are rejected, out-of-range values clamped."""
    try:
        parsed_limit = int(limit) if limit is not None else None
        parsed_offset = int(offset) if offset is not None else None
    except ValueError:
        raise ValidationError("limit and offset must be integers", "INVALID_PAGINATION")
    return clamp_pagination(parsed_limit, parsed_offset)


async def forbid_identity_in_body(request: Request) -> None:
    """
    Reject bodies that try to name the owning user.

    Ownership always comes from the authenticated caller.
    """
    body = await request.body()
    if not body:
        return
    try:
        data = json.loads(body)
    except ValueError:
        return
    if isinstance(data, dict) and any(key in data for key in IDENTITY_FIELDS):
        raise ValidationError("User ID cannot be provided in request body", "USER_ID_NOT_ALLOWED")


def check_user_filter(user_id: Optional[str], current_user: User) -> None:
    """
    Validate a ``userId`` list filter; only the caller's own id is allowed.

    Raises:
        ValidationError: If the value is not a positive integer
        AuthorizationError: If it names another user
    """
    requested = parse_id(user_id, "INVALID_USER_ID", "userId")
    if requested is not None and requested != current_user.id:
        logger.warning(f"User {current_user.id} requested records of user {requested}")
        raise AuthorizationError("Cannot access other users' records", "UNAUTHORIZED_ACCESS")
