# leave_manager/schemas/leave_schema.py
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from leave_manager.results import Ok, Result, validation_error
from leave_manager.schemas.validators import (
    IsoDate, Phone, SignatureDataUrl, collect_errors, parse_iso_date,
)


class Department(str, Enum):
    DEVELOPMENT = "개발팀"
    PRODUCTION_SUPPORT = "생산지원팀"
    PRODUCTION = "생산팀"
    FACILITIES = "공무팀"


class LeaveType(str, Enum):
    ANNUAL = "연차"
    HALF_DAY = "반차"
    SICK = "병가"
    FAMILY_EVENT = "경조사"


class RequestStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELED = "Canceled"


class LeaveCreateSchema(BaseModel):
    # status / requesterId from the client are ignored
    model_config = ConfigDict(extra="ignore")

    dateRequested: IsoDate
    empId: str = Field(min_length=1)
    name: str = Field(min_length=1)
    dept: Department
    position: str = Field(min_length=1)
    leaveType: LeaveType
    startDate: IsoDate
    endDate: IsoDate
    note: Optional[str] = ""
    handoverPerson: str = Field(min_length=1)
    contact: Phone
    signatureDataUrl: SignatureDataUrl


class StatusUpdateSchema(BaseModel):
    status: RequestStatus


class ApproveSchema(BaseModel):
    signatureDataUrl: SignatureDataUrl


def validate_leave_payload(raw: Any) -> Result:
    """
    Validate a submission body. Every failing field is reported, including the
    end-before-start check when both dates parse.
    """
    if not isinstance(raw, dict):
        return validation_error({}, ["Request body must be a JSON object"])

    data = None
    errors = {}
    try:
        data = LeaveCreateSchema.model_validate(raw)
    except ValidationError as exc:
        errors = collect_errors(exc)

    start = parse_iso_date(raw.get("startDate"))
    end = parse_iso_date(raw.get("endDate"))
    if start and end and end < start:
        errors.setdefault("endDate", []).append("endDate must be the same as or after startDate")

    if errors:
        return validation_error(errors)
    return Ok(data)

