import pytest
from fastapi.testclient import TestClient

from coursehub.core.config import Settings
from coursehub.core.identity import TokenVerificationError, VerifiedToken
from coursehub.db.init_db import init_db
from coursehub.db.session import build_engine, build_session_factory
from coursehub.main import create_app
from coursehub.models.course import Course
from coursehub.models.user import User

# token -> (uid, email)
TOKENS = {
    "student1-token": ("student-1", "student1@example.com"),
    "student2-token": ("student-2", "student2@example.com"),
    "teacher-token": ("teacher-1", "teacher1@example.com"),
    "teacher2-token": ("teacher-2", "teacher2@example.com"),
    "admin-token": ("admin-1", "admin1@example.com"),
    "norole-token": ("norole-1", "norole@example.com"),
    "stranger-token": ("stranger-1", "stranger@example.com"),
}


class FakeIdentityProvider:
    """Maps known tokens to claims and records every call."""

    def __init__(self, tokens=None):
        self.tokens = dict(TOKENS if tokens is None else tokens)
        self.calls: list[str] = []
        self.fail_transient = False

    def verify_id_token(self, token: str) -> VerifiedToken:
        self.calls.append(token)
        if self.fail_transient:
            raise TokenVerificationError("backend unavailable", transient=True)
        if token not in self.tokens:
            raise TokenVerificationError("unknown token")
        uid, email = self.tokens[token]
        return VerifiedToken(uid=uid, email=email)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test_coursehub.db'}"


@pytest.fixture()
def session_factory(database_url):
    engine = build_engine(database_url)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seed_users(session_factory):
    """Directory records for every fake token except the stranger."""
    db = session_factory()
    try:
        db.add_all(
            [
                User(uid="student-1", email="student1@example.com", display_name="Student One", role="student"),
                User(uid="student-2", email="student2@example.com", display_name="Student Two", role="student"),
                User(uid="teacher-1", email="teacher1@example.com", display_name="Teacher One", role="teacher"),
                User(uid="teacher-2", email="teacher2@example.com", role="teacher"),
                User(uid="admin-1", email="admin1@example.com", display_name="Admin One", role="admin"),
                User(uid="norole-1", email="norole@example.com", role=None),
            ]
        )
        db.commit()
    finally:
        db.close()


@pytest.fixture()
def make_course(session_factory):
    """Insert an approved, active course directly."""

    def _make(**overrides):
        values = {
            "title": "Intro to Theology",
            "description": "Foundations",
            "instructor_id": "teacher-1",
            "instructor_name": "Teacher One",
            "category": "Theology",
            "duration": 8,
            "max_students": 50,
            "is_active": True,
            "is_approved": True,
        }
        values.update(overrides)
        db = session_factory()
        try:
            course = Course(**values)
            db.add(course)
            db.commit()
            return course.id
        finally:
            db.close()

    return _make


@pytest.fixture()
def provider():
    return FakeIdentityProvider()


@pytest.fixture()
def settings(database_url):
    return Settings(environment="test", database_url=database_url)


@pytest.fixture()
def client(settings, provider, session_factory, seed_users):
    app = create_app(settings=settings, identity_provider=provider)
    with TestClient(app) as c:
        yield c
