# leave_manager/bootstrap.py
"""
One-shot, idempotent database initialisation run at startup:

1. create missing tables
2. add columns that older databases lack
3. seed the demo accounts
"""
import logging
import re
import uuid

from sqlalchemy import inspect, text
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from leave_manager.auth.roles import Role
from leave_manager.database import Base
from leave_manager.leaves.models import LeaveRequest  # noqa: F401  (registers table)
from leave_manager.users.models import User
from leave_manager.worklogs.models import WorkLog  # noqa: F401

log = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

LEGACY_COLUMNS = {
    # columns added after the first release; older databases lack them
    "requests": [
        ("handoverPerson", "TEXT"),
        ("contact", "TEXT"),
        ("signature", "TEXT"),
        ("managerSignature", "TEXT"),
        ("managerSignerId", "TEXT"),
        ("managerSignedAt", "TEXT"),
        ("requesterId", "TEXT"),
    ],
    "worklogs": [
        ("uploaderId", "TEXT"),
        ("fileName", "TEXT"),
        ("filePath", "TEXT"),
        ("signature", "TEXT"),
        ("status", "TEXT"),
        ("createdAt", "TEXT"),
    ],
}

DEFAULT_USERS = [
    # username, display name, role, password
    ("admin", "관리자", Role.ADMIN, "admin123!"),
    ("manager", "홍팀장", Role.MANAGER, "manager123!"),
    ("hr", "김인사", Role.HR, "hr123!"),
    ("employee", "이사원", Role.EMPLOYEE, "emp123!"),
]


def ensure_column(engine, table: str, column: str, col_type: str) -> bool:
    """Add `column` to `table` when it is missing. Returns True if it was added."""
    for ident in (table, column, col_type):
        if not _IDENTIFIER.match(ident):
            raise ValueError(f"Invalid identifier: {ident}")

    existing = {c["name"] for c in inspect(engine).get_columns(table)}
    if column in existing:
        return False
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))
    log.info("[migrate] %s.%s added", table, column)
    return True


def seed_user(db: Session, username: str, name: str, role: Role, password: str) -> User:
    """Insert the account, or re-hash and update it when the password no longer matches."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            name=name,
            role=role.value,
            password_hash=generate_password_hash(password),
        )
        db.add(user)
        db.commit()
        log.info("seeded user: %s/%s", username, role.value)
    elif not user.check_password(password):
        user.password_hash = generate_password_hash(password)
        user.name = name
        user.role = role.value
        db.commit()
        log.info("updated user password: %s", username)
    return user


def init_db(engine, seed_users: bool = True) -> None:
    Base.metadata.create_all(bind=engine)

    for table, columns in LEGACY_COLUMNS.items():
        for column, col_type in columns:
            ensure_column(engine, table, column, col_type)

    if seed_users:
        with Session(engine) as db:
            for username, name, role, password in DEFAULT_USERS:
                seed_user(db, username, name, role, password)
