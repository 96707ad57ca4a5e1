# siap_bimbingan/schemas/common.py
import re
from typing import Annotated, List

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from siap_bimbingan.utils.constants import IDENTIFIER_PATTERN
from siap_bimbingan.utils.time_utils import is_valid_time_string, time_to_minutes


class CamelModel(BaseModel):
    """
    Base for every request/response schema.

    Payloads travel as camelCase but snake_case input is accepted too, so the
    naming difference is resolved here instead of in each endpoint. Unknown
    fields are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


def _check_time(value: str) -> str:
    if not is_valid_time_string(value):
        raise ValueError("Invalid time format (HH:MM)")
    return value


def _check_identifier(value: str) -> str:
    if not re.fullmatch(IDENTIFIER_PATTERN, value):
        raise ValueError("Must be exactly 10 digits")
    return value


TimeStr = Annotated[str, AfterValidator(_check_time)]
IdentifierStr = Annotated[str, AfterValidator(_check_identifier)]


def ensure_end_after_start(start_time, end_time):
    """Cross-field rule shared by every schema carrying a time range."""
    if start_time is None or end_time is None:
        return
    if time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise ValueError("End time must be after start time")


class MessageResponse(BaseModel):
    message: str


class ValidationErrorItem(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    message: str
    errors: List[ValidationErrorItem]


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


def paginate(items: list, total: int, page: int, limit: int) -> dict:
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit if limit else 0,
        },
    }
