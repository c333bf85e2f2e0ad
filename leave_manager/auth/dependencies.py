# leave_manager/auth/dependencies.py
from typing import Optional
import logging

from fastapi import Header, HTTPException, Depends
from sqlalchemy.orm import Session

from leave_manager.auth.guard import CurrentUser
from leave_manager.auth.jwt_handler import decode_jwt
from leave_manager.auth.roles import parse_role
from leave_manager.database import get_db
from leave_manager.users.models import User

logger = logging.getLogger(__name__)


# -------------------------------------------
# Helper: Extract Bearer token safely
# -------------------------------------------
def _extract_bearer(auth_header: Optional[str]) -> Optional[str]:
    """
    Extract bearer token from Authorization header.
    Returns None if header missing or malformed.
    """
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


# -------------------------------------------
# Resolve token -> real DB user (single source of truth)
# -------------------------------------------
def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Decode the Bearer token and load the user it names.
    The role comes from the users table, not from the token claim.
    """
    token = _extract_bearer(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    payload = decode_jwt(token)
    if payload is None:
        logger.warning("Rejected invalid/expired token")
        raise HTTPException(status_code=401, detail="Invalid/expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user or parse_role(user.role) is None:
        logger.warning("Token subject %s not found", user_id)
        raise HTTPException(status_code=401, detail="Invalid token")

    return CurrentUser(id=user.id, name=user.name, role=parse_role(user.role))
