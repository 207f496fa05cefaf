"""
Test fixtures for the dojo exam tracker.

Provides app, client and db fixtures backed by a file-based SQLite
database, plus an in-memory ExamEngine running on a fixed clock.
"""

from __future__ import annotations

import pytest
from datetime import date

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

TODAY = date(2024, 6, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_student():
    """Factory for Student records with sensible defaults."""
    from grade_ladder import get_grade
    from students import InternationalCourseCredit, Student

    def _make(student_id="s1", category="adult", grade_id="adult_6_kyu",
              join_date=date(2024, 1, 1), birth_date=date(1990, 5, 20),
              courses=0, **kwargs):
        return Student(
            id=student_id,
            name=kwargs.pop("name", f"Student {student_id}"),
            category=category,
            birth_date=birth_date,
            join_date=join_date,
            grade=get_grade(grade_id),
            international_courses=[
                InternationalCourseCredit(name=f"Course {i}") for i in range(courses)
            ],
            **kwargs,
        )

    return _make


@pytest.fixture
def attend():
    """Factory for attendance entries."""
    from attendance import AttendanceRecord

    def _attend(student_id, on, present=True, session_type="normal", value=None):
        return AttendanceRecord(
            student_id=student_id,
            date=on,
            present=present,
            session_type=session_type,
            attendance_value=value,
        )

    return _attend


@pytest.fixture
def engine():
    """ExamEngine over in-memory stores with the clock fixed at TODAY."""
    from exam_engine import ExamEngine
    from stores import InMemoryAttendanceLog, InMemoryStudentDirectory

    sent = []

    def mailer(to, subject, body):
        sent.append((to, subject, body))
        return True

    eng = ExamEngine(
        students=InMemoryStudentDirectory(),
        attendance=InMemoryAttendanceLog(),
        clock=lambda: TODAY,
        mailer=mailer,
    )
    eng.sent_mail = sent
    return eng


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite for testing."""
    from app import create_app

    db_file = str(tmp_path / "test.db")
    app = create_app({
        "TESTING": True,
        "DATABASE": db_file,
        "SECRET_KEY": "test-secret-key",
        "EMAIL_BACKEND": "log",
        "EXAM_CLOCK": lambda: TODAY,
    })

    with app.app_context():
        from database import init_db
        init_db()

    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Direct database access for store tests."""
    with app.app_context():
        from database import get_db
        yield get_db()
