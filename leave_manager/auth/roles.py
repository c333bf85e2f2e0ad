# leave_manager/auth/roles.py
"""
The closed set of roles.

Roles are NOT ranked: every operation lists the roles it accepts explicitly
(see the *_ROLES tuples next to each service function), so "admin" only gets
what it is named for.
"""
from enum import Enum
from typing import Optional


class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    ADMIN = "admin"


ALL_ROLES = (Role.EMPLOYEE, Role.MANAGER, Role.HR, Role.ADMIN)


def parse_role(value) -> Optional[Role]:
    """Return the Role for a stored/claimed value, or None if it isn't one of ours."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None
