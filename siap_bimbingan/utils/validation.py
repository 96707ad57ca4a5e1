import logging
from typing import Any, Dict, List, Mapping, Sequence, Type

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from siap_bimbingan.schemas.academic_period import AcademicPeriodCreate
from siap_bimbingan.schemas.availability import AvailabilityCreate, AvailabilityUpdate
from siap_bimbingan.schemas.guidance import (
    NoteCreate,
    SessionDecline,
    SessionOfferCreate,
    SessionRequestCreate,
    SessionRequestUpdate,
)
from siap_bimbingan.schemas.imports import (
    ScheduleImportRow,
    StudentImportRow,
    ThesisProjectImportRow,
)
from siap_bimbingan.schemas.room import RoomCreate
from siap_bimbingan.schemas.schedule import ConflictCheckRequest, ScheduleCreate, ScheduleUpdate
from siap_bimbingan.schemas.thesis import ThesisProjectCreate
from siap_bimbingan.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Validation failed"

SCHEMAS: Dict[str, Type[BaseModel]] = {
    "createUser": UserCreate,
    "updateUser": UserUpdate,
    "createSchedule": ScheduleCreate,
    "updateSchedule": ScheduleUpdate,
    "checkConflict": ConflictCheckRequest,
    "createAvailability": AvailabilityCreate,
    "updateAvailability": AvailabilityUpdate,
    "requestSession": SessionRequestCreate,
    "updateSessionRequest": SessionRequestUpdate,
    "offerSession": SessionOfferCreate,
    "declineSession": SessionDecline,
    "createNote": NoteCreate,
    "createThesisProject": ThesisProjectCreate,
    "createAcademicPeriod": AcademicPeriodCreate,
    "createRoom": RoomCreate,
    "importScheduleRow": ScheduleImportRow,
    "importStudentRow": StudentImportRow,
    "importThesisProjectRow": ThesisProjectImportRow,
}


class PayloadValidationError(Exception):
    """Raised when a payload fails its named schema; carries every violation."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(VALIDATION_FAILED_MESSAGE)
        self.errors = errors


def _error_message(error: Mapping[str, Any]) -> str:
    # Messages raised from our own validators are surfaced without pydantic's prefix
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return error["msg"]


def format_errors(errors: Sequence[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ordered ``{field, message}`` pairs."""
    formatted = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "body"
        formatted.append({"field": field, "message": _error_message(error)})
    return formatted


def validate_payload(schema_name: str, payload: Any) -> BaseModel:
    """
    Validate a payload against a named schema.

    All violations are collected, unknown fields are dropped.

    Args:
        schema_name: Key in ``SCHEMAS``
        payload: Raw mapping, usually a decoded JSON body or a CSV row

    Returns:
        BaseModel: The validated schema instance

    Raises:
        KeyError: if the schema name is not registered
        PayloadValidationError: if any field is invalid
    """
    schema = SCHEMAS[schema_name]
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise PayloadValidationError(format_errors(exc.errors())) from exc


def validation_error_body(errors: List[Dict[str, str]]) -> Dict[str, Any]:
    return {"message": VALIDATION_FAILED_MESSAGE, "errors": errors}


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = format_errors(exc.errors())
    logger.info(f"Rejected {request.method} {request.url.path}: {len(errors)} invalid field(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=validation_error_body(errors),
    )


async def payload_validation_exception_handler(
    request: Request, exc: PayloadValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=validation_error_body(exc.errors),
    )
