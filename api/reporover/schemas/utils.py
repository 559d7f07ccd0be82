"""
Shared schema building blocks.
"""
import json
from datetime import datetime
from typing import Annotated, Any, List, Optional
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel
from reporover.models.types import as_utc


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON keys (both accepted on input)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def strip_required(v: Any) -> Any:
    """Trim a required string and reject it if nothing is left."""
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
    return v


def strip_optional(v: Optional[str]) -> Optional[str]:
    """Trim an optional string, mapping blank values to None."""
    if v is None:
        return None
    v = v.strip()
    return v or None


def parse_string_list(v: Any) -> Any:
    """
    Accept a list of strings or a JSON-encoded list of strings.

    Older clients send quiz options as a JSON string; the domain model is an
    ordered list either way.
    """
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError("must be a list of strings or a JSON-encoded list") from e
    if not isinstance(v, list):
        raise ValueError("must be a list of strings")
    return [str(item) for item in v]


RequiredStr = Annotated[str, BeforeValidator(strip_required)]
OptionalStr = Annotated[Optional[str], AfterValidator(strip_optional)]
StringList = Annotated[List[str], BeforeValidator(parse_string_list)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
