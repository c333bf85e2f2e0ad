# leave_manager/schemas/validators.py
"""Field rules shared by the request/work-log schemas."""
import re
from datetime import date, datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, ValidationError

from leave_manager.results import Ok, Result, validation_error

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# digits, dash, whitespace, parens, plus; 7-20 chars
PHONE_RE = re.compile(r"^[0-9\-\s()+]{7,20}$")
SIGNATURE_RE = re.compile(r"^data:image/(png|jpeg);base64,")


def parse_iso_date(value) -> Optional[date]:
    """Strict YYYY-MM-DD -> date, None for anything else (incl. 2025-02-30)."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def check_date(value: str) -> str:
    if not DATE_RE.match(value):
        raise ValueError("must be a YYYY-MM-DD date")
    if parse_iso_date(value) is None:
        raise ValueError("is not a valid calendar date")
    return value


def check_phone(value: str) -> str:
    if not PHONE_RE.match(value):
        raise ValueError("contact number format is invalid")
    return value


def is_signature(value) -> bool:
    return isinstance(value, str) and SIGNATURE_RE.match(value) is not None


def check_signature(value: str) -> str:
    if not is_signature(value):
        raise ValueError("signature must be a data:image/png or data:image/jpeg base64 URL")
    return value


def collect_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic ValidationError into {field: [messages]}, keeping every failure."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "_form"
        msg = err.get("msg", "invalid")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(field, []).append(msg)
    return errors


IsoDate = Annotated[str, AfterValidator(check_date)]
Phone = Annotated[str, AfterValidator(check_phone)]
SignatureDataUrl = Annotated[str, AfterValidator(check_signature)]


def validate_model(schema, raw) -> Result:
    """Generic body validation -> Ok(model) | Err(validation)."""
    if not isinstance(raw, dict):
        return validation_error({}, ["Request body must be a JSON object"])
    try:
        return Ok(schema.model_validate(raw))
    except ValidationError as exc:
        return validation_error(collect_errors(exc))
