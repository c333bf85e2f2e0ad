# leave_manager/leaves/router.py
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from leave_manager.auth.dependencies import get_current_user
from leave_manager.auth.guard import CurrentUser
from leave_manager.database import get_db
from leave_manager.leaves import service
from leave_manager.results import to_response

router = APIRouter(prefix="/api/requests", tags=["requests"])

# Role requirements live next to each service function (service.*_ROLES);
# routes only resolve the caller and translate results.


@router.get("")
def list_requests(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return to_response(service.list_all(db, user))


@router.get("/mine")
def list_my_requests(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return to_response(service.list_mine(db, user))


@router.get("/recent")
def list_recent_requests(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return to_response(service.list_recent(db, user))


@router.post("", status_code=201)
def create_request(payload: Any = Body(None), db: Session = Depends(get_db),
                   user: CurrentUser = Depends(get_current_user)):
    return to_response(service.submit(db, payload, user), status_code=201)


@router.put("/{request_id}/status")
def update_request_status(request_id: str, payload: Any = Body(None), db: Session = Depends(get_db),
                          user: CurrentUser = Depends(get_current_user)):
    return to_response(service.update_status(db, request_id, payload, user))


@router.get("/{request_id}/signature")
def get_request_signature(request_id: str, db: Session = Depends(get_db),
                          user: CurrentUser = Depends(get_current_user)):
    result = service.get_signature(db, request_id, user)
    if not result.ok:
        return to_response(result)
    return JSONResponse({"ok": True, "dataUrl": result.value})


@router.post("/{request_id}/approve")
def approve_request(request_id: str, payload: Any = Body(None), db: Session = Depends(get_db),
                    user: CurrentUser = Depends(get_current_user)):
    return to_response(service.approve_with_signature(db, request_id, payload, user))
