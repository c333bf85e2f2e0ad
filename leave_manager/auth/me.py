# leave_manager/auth/me.py
from fastapi import APIRouter, Depends

from leave_manager.auth.dependencies import get_current_user
from leave_manager.auth.guard import CurrentUser
from leave_manager.results import Ok, to_response

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/me")
def read_me(user: CurrentUser = Depends(get_current_user)):
    """Return the caller as the server sees it (id, name, role)."""
    return to_response(Ok(user.model_dump(mode="json")))
