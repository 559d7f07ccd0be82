"""
Shared helpers for the CRUD endpoints: lookups, ownership checks,
pagination and partial updates.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlmodel import Session, SQLModel
from sqlalchemy.exc import IntegrityError

from reporover.core.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class Pagination:
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def apply(self, query):
        return query.offset(self.offset).limit(self.limit)


def clamp_pagination(limit: Optional[int], offset: Optional[int]) -> Pagination:
    """Limit defaults to 10 and is clamped to [1, 100]; a negative offset becomes 0."""
    if limit is None:
        limit = DEFAULT_LIMIT
    return Pagination(
        limit=min(max(limit, 1), MAX_LIMIT),
        offset=max(offset or 0, 0),
    )


def get_or_404(session: Session, model: Type[ModelT], record_id: int, code: str, label: str) -> ModelT:
    """
    Fetch a record by primary key.

    Raises:
        NotFoundError: With the given code if the record does not exist
    """
    record = session.get(model, record_id)
    if record is None:
        raise NotFoundError(f"{label} not found", code)
    return record


def get_owned_or_404(
    session: Session,
    model: Type[ModelT],
    record_id: int,
    user_id: int,
    code: str,
    label: str
) -> ModelT:
    """
    Fetch a user-owned record.

    A record belonging to someone else is reported exactly like a missing one.
    """
    record = session.get(model, record_id)
    if record is None or getattr(record, "user_id") != user_id:
        raise NotFoundError(f"{label} not found", code)
    return record


def changed_fields(payload: BaseModel, required: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Return the fields present in an update payload.

    Raises:
        ValidationError: If a required column is explicitly set to null
    """
    data = payload.model_dump(exclude_unset=True)
    for name in required:
        if name in data and data[name] is None:
            raise ValidationError(f"{name} cannot be null", "INVALID_INPUT")
    return data


def apply_changes(record: SQLModel, data: Dict[str, Any]) -> bool:
    """Set attributes from ``data`` on ``record``; returns whether anything was given."""
    for name, value in data.items():
        setattr(record, name, value)
    return bool(data)


def save(session: Session, record: ModelT) -> ModelT:
    """
    Commit a new or changed record.

    Raises:
        ConflictError: If a unique constraint is violated
    """
    session.add(record)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error saving {type(record).__name__}: {e.orig}")
        raise ConflictError(f"{type(record).__name__} conflicts with an existing record") from e
    session.refresh(record)
    return record


def delete(session: Session, record: SQLModel) -> None:
    session.delete(record)
    session.commit()
