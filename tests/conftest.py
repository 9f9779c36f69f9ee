from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from coursehub.core.config import Settings
from coursehub.core.security import Identity, create_access_token, now_utc
from coursehub.db.base import Base
from coursehub.db.session import Database
from coursehub.main import create_app
from coursehub.models import Assignment, Enrollment, User
from coursehub.schemas.courses import CourseCreateRequest
from coursehub.services import course_service

JWT_SECRET = "test-secret"


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, database_url="sqlite://", jwt_secret=JWT_SECRET, seed_data=False)


@pytest.fixture()
def database(settings: Settings):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield Database(settings, engine=engine)
    engine.dispose()


@pytest.fixture()
def db(database: Database):
    with database.session() as session:
        yield session


@pytest.fixture()
def client(settings: Settings, database: Database):
    app = create_app(settings, database)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(db):
    def _make(role: str = "student", **fields) -> Identity:
        user = User(
            email=fields.pop("email", f"{role}_{uuid4().hex[:8]}@example.com"),
            first_name=fields.pop("first_name", role.title()),
            last_name=fields.pop("last_name", "Tester"),
            role=role,
            status=fields.pop("status", "active"),
        )
        db.add(user)
        db.commit()
        return Identity(user_id=user.id, role=user.role)

    return _make


@pytest.fixture()
def auth_headers():
    def _headers(identity: Identity, secret: str = JWT_SECRET) -> dict[str, str]:
        token = create_access_token(str(identity.user_id), identity.role, secret)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def make_course(db):
    def _make(owner: Identity, **overrides):
        data = {
            "title": "Intro to Databases",
            "description": "Relational modelling and SQL",
            "course_code": f"DB{uuid4().hex[:6]}",
            "category": "Computer Science",
            "level": "Beginner",
            "credits": 3,
            "max_students": 30,
        }
        data.update(overrides)
        return course_service.create_course(db, CourseCreateRequest(**data), owner)

    return _make


@pytest.fixture()
def make_assignment(db):
    def _make(course_id, *, total_points: float = 100, due_in: timedelta = timedelta(days=7)) -> Assignment:
        assignment = Assignment(
            course_id=course_id,
            title="Homework",
            due_date=now_utc() + due_in,
            total_points=total_points,
        )
        db.add(assignment)
        db.commit()
        return assignment

    return _make


@pytest.fixture()
def enroll_student(db):
    def _enroll(student: Identity, course_id, status: str = "enrolled") -> Enrollment:
        enrollment = Enrollment(student_id=student.user_id, course_id=course_id, status=status)
        db.add(enrollment)
        db.commit()
        return enrollment

    return _enroll
