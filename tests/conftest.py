import os
import uuid
from datetime import datetime

# Settings are read at import time; point them at SQLite before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models import (
    AcademicYear,
    ContentBlock,
    Department,
    Enrollment,
    LearningSession,
    LessonPlan,
    Program,
    Student,
    Subject,
    Syllabus,
)


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test"""
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
def client(db):
    """TestClient whose requests share the test session"""

    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def academic_year(db):
    year = AcademicYear(year_name="2024-2025", is_active=True)
    db.add(year)
    db.commit()
    return year


@pytest.fixture
def make_student(db):
    def _make(program_type="UG", with_department=True, **fields):
        program = Program(name=f"{program_type} Program", program_type=program_type, duration_years=4)
        db.add(program)
        department = None
        if with_department:
            department = Department(name="Computer Science")
            db.add(department)
        db.flush()

        fields.setdefault("enrollment_date", datetime(2022, 7, 1))
        student = Student(
            name="Asha Rao",
            email=f"{uuid.uuid4().hex[:8]}@example.edu",
            program_id=program.id,
            department_id=department.id if department else None,
            **fields,
        )
        db.add(student)
        db.commit()
        return student

    return _make


@pytest.fixture
def subject(db):
    subject = Subject(code="CS301", name="Operating Systems", credits=4, semester_number=3)
    db.add(subject)
    db.commit()
    return subject


@pytest.fixture
def make_session(db):
    """Creates a learning session (with its syllabus and lesson plan) under a subject"""

    def _make(subject, title="Session 1"):
        syllabus = Syllabus(subject_id=subject.id, title=f"{subject.name} syllabus")
        db.add(syllabus)
        db.flush()
        plan = LessonPlan(syllabus_id=syllabus.id, title="Plan")
        db.add(plan)
        db.flush()
        session = LearningSession(lesson_plan_id=plan.id, title=title)
        db.add(session)
        db.commit()
        return session

    return _make


@pytest.fixture
def make_block(db):
    def _make(session, type="text", is_required=True, content_data=None, order_index=0, **fields):
        block = ContentBlock(
            session_id=session.id,
            title=f"{type} block {order_index}",
            type=type,
            is_required=is_required,
            content_data=content_data,
            order_index=order_index,
            **fields,
        )
        db.add(block)
        db.commit()
        return block

    return _make


@pytest.fixture
def make_enrollment(db, academic_year):
    def _make(student_id, subject, status="active", progress_percentage=0):
        enrollment = Enrollment.create(
            student_id=student_id,
            subject_id=subject.id,
            semester_number=subject.semester_number,
            academic_year_id=academic_year.id,
            progress_percentage=progress_percentage,
        )
        enrollment.status = status
        db.add(enrollment)
        db.commit()
        return enrollment

    return _make


QUIZ_QUESTIONS = [
    {"id": "q1", "type": "multiple-choice", "options": ["2", "3", "4"], "correctAnswer": 2, "points": 1},
    {"id": "q2", "type": "true-false", "correctAnswer": 1, "points": 1},
    {"id": "q3", "type": "fill-in-blank", "correctAnswer": "Paris", "points": 1},
]


@pytest.fixture
def quiz_questions():
    return [dict(q) for q in QUIZ_QUESTIONS]
