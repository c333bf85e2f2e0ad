"""
Pytest configuration and fixtures.
"""
import os
import tempfile

# must be set before leave_manager.config is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DOC_DIR"] = tempfile.mkdtemp(prefix="leave_manager_docs_")
os.environ["SEED_DEFAULT_USERS"] = "0"

import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leave_manager.auth.guard import CurrentUser
from leave_manager.auth.jwt_handler import create_access_token
from leave_manager.auth.roles import Role
from leave_manager.bootstrap import init_db, seed_user
from leave_manager.database import get_db
from leave_manager.main import app
from leave_manager.storage.blob_store import LocalBlobStore, get_blob_store
from leave_manager.users.models import User

SIGNATURE = "data:image/png;base64,AAAA"


@pytest.fixture
def engine():
    """In-memory database shared by every session in a test, seeded with the four demo users."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def users(db):
    """username -> User for the seeded accounts plus a second employee."""
    seed_user(db, "employee2", "박사원", Role.EMPLOYEE, "emp456!")
    return {u.username: u for u in db.query(User).all()}


@pytest.fixture
def callers(users):
    """username -> CurrentUser, as the auth dependency would build it."""
    return {
        name: CurrentUser(id=u.id, name=u.name, role=Role(u.role))
        for name, u in users.items()
    }


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(root=tmp_path / "doc_data")


@pytest.fixture
def client(session_factory, blob_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(users):
    def _headers(username):
        user = users[username]
        token = create_access_token({"sub": user.id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def leave_payload():
    """A valid submission body; pass overrides to tweak fields."""
    def _payload(**overrides):
        body = {
            "dateRequested": date.today().isoformat(),
            "empId": "E0001",
            "name": "이사원",
            "dept": "개발팀",
            "position": "사원",
            "leaveType": "연차",
            "startDate": "2025-01-10",
            "endDate": "2025-01-12",
            "note": "",
            "handoverPerson": "X",
            "contact": "010-1234-5678",
            "signatureDataUrl": SIGNATURE,
        }
        body.update(overrides)
        return body
    return _payload
