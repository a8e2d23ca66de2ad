import os

# The application engine is built at import time; point it at SQLite before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.schemas.timetable import CoursePayload, VenuePayload


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_course():
    counter = itertools.count(1)

    def factory(**overrides) -> CoursePayload:
        index = next(counter)
        data = {
            "id": f"c{index}",
            "code": f"CSC{300 + index}",
            "name": f"Course {index}",
            "lecturer": f"Dr. Lecturer {index}",
            "class_size": 40,
            "department": "Computer Science",
        }
        data.update(overrides)
        return CoursePayload(**data)

    return factory


@pytest.fixture()
def make_venue():
    counter = itertools.count(1)

    def factory(**overrides) -> VenuePayload:
        index = next(counter)
        data = {"id": f"v{index}", "name": f"Hall {index}", "capacity": 100}
        data.update(overrides)
        return VenuePayload(**data)

    return factory
