"""Shared fixtures: an in-memory SQLite session and small entity factories."""

import os
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import coursehub.models  # noqa: E402,F401
from coursehub.database import Base  # noqa: E402
from coursehub.models.user import User, UserRole  # noqa: E402
from coursehub.services import course_service  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Insert a user directly; the credential hash is opaque to the services under test."""
    counter = {"n": 0}

    def _make(role: str = UserRole.student.value, first_name: str = "Test", last_name: str = "User") -> User:
        counter["n"] += 1
        user = User(
            email=f"{role.lower()}{counter['n']}@example.com",
            password_hash="not-a-real-hash",
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def instructor(make_user):
    return make_user(UserRole.instructor.value, "Ada", "Lovelace")


@pytest.fixture
def student(make_user):
    return make_user(UserRole.student.value, "Sam", "Student")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.admin.value, "Root", "Admin")


@pytest.fixture
def make_course(db, instructor):
    """Create a course with N lessons, optionally pushed through approval."""

    def _make(
        lessons: int = 2,
        approve: bool = True,
        title: str = "Intro to X",
        category: str = "Programming",
        price: float = 20.0,
        owner: User = None,
    ):
        owner = owner or instructor
        result = course_service.create_course(
            db,
            title=title,
            description=f"All about {title}",
            price=price,
            category=category,
            instructor_id=owner.id,
        )
        assert result.success, result.message
        course = result.get("course")
        for i in range(lessons):
            assert course_service.add_lesson(db, course.id, f"Lesson {i + 1}").success
        if approve:
            assert course_service.submit_for_approval(db, course.id, owner.id).success
            assert course_service.review_course(db, course.id, approve=True).success
        db.refresh(course)
        return course

    return _make
