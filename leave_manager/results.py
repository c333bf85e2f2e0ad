# leave_manager/results.py
"""
Tagged results returned by the lifecycle services.

Services never raise past their boundary for expected failures; they return
``Ok(value)`` or ``Err(kind, message, detail)`` and the API layer turns that into
an HTTP response with ``to_response``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class Ok:
    value: Any = None
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    detail: Dict[str, Any] = field(default_factory=dict)
    ok: bool = field(default=False, init=False)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


Result = Union[Ok, Err]


def validation_error(field_errors: Dict[str, List[str]], form_errors: Optional[List[str]] = None) -> Err:
    return Err(
        ErrorKind.VALIDATION,
        "Validation error",
        {"fieldErrors": field_errors, "formErrors": form_errors or []},
    )


def error_body(message: str, detail: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body = {"ok": False, "error": message}
    if detail:
        body.update(detail)
    return body


def to_response(result: Result, status_code: int = 200) -> JSONResponse:
    """Render a result using the `{ok, data}` / `{ok:false, error}` envelope."""
    if isinstance(result, Err):
        return JSONResponse(error_body(result.message, result.detail), status_code=result.status_code)
    return JSONResponse({"ok": True, "data": result.value}, status_code=status_code)
