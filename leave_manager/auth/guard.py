# leave_manager/auth/guard.py
import logging
from typing import Iterable, Optional

from pydantic import BaseModel

from leave_manager.auth.roles import Role, parse_role
from leave_manager.results import Err, ErrorKind, Ok, Result

log = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    """Authenticated caller as resolved from the token + users table."""
    id: str
    name: str = ""
    role: Role


def require(caller: Optional[CurrentUser], allowed_roles: Iterable[Role]) -> Result:
    """
    Capability check run at the top of every lifecycle operation.

    Ok(caller) when the caller holds one of `allowed_roles`,
    Err(UNAUTHORIZED) when there is no valid caller,
    Err(FORBIDDEN) when the caller's role is not in the set.
    """
    if caller is None or not caller.id:
        return Err(ErrorKind.UNAUTHORIZED, "Unauthorized")

    role = parse_role(caller.role)
    allowed = {parse_role(r) for r in allowed_roles}
    if role is None or role not in allowed:
        log.warning("Forbidden: user=%s role=%s allowed=%s", caller.id, caller.role,
                    sorted(r.value for r in allowed if r))
        return Err(ErrorKind.FORBIDDEN, "Forbidden")
    return Ok(caller)
