# leave_manager/auth/login.py

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from leave_manager.auth.authenticator import authenticate
from leave_manager.database import get_db
from leave_manager.results import to_response

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login")
def login_post(payload: Any = Body(None), db: Session = Depends(get_db)):
    result = authenticate(db, payload)
    if not result.ok:
        return to_response(result)
    # login keeps the flat {ok, token, user} shape the client expects
    return JSONResponse({"ok": True, **result.value})
