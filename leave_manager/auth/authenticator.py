# leave_manager/auth/authenticator.py
import logging
from typing import Any

from sqlalchemy.orm import Session

from leave_manager.auth.jwt_handler import create_access_token
from leave_manager.database import storage_errors_as_results
from leave_manager.results import Err, ErrorKind, Ok, Result
from leave_manager.schemas.auth_schema import LoginSchema
from leave_manager.schemas.validators import validate_model
from leave_manager.users.models import User

log = logging.getLogger(__name__)


@storage_errors_as_results
def authenticate(db: Session, payload: Any) -> Result:
    """
    Exchange {username, password} for a signed token.
    Ok({"token", "user"}) on success; unknown user and wrong password both
    come back as the same Unauthorized error.
    """
    parsed = validate_model(LoginSchema, payload)
    if not parsed.ok:
        return parsed
    creds = parsed.value

    user = db.query(User).filter(User.username == creds.username).first()
    if not user or not user.check_password(creds.password):
        log.warning("Failed login for username=%s", creds.username)
        return Err(ErrorKind.UNAUTHORIZED, "Invalid credentials")

    token = create_access_token({"sub": user.id, "role": user.role})
    log.info("User %s (%s) logged in", user.username, user.role)
    return Ok({"token": token, "user": user.to_public()})
