"""
Store interfaces and in-memory implementations.

A StudentDirectory is read and written as a whole: every mutation loads
the full collection, replaces one record and writes the collection back.
Each write bumps the record's ``version``; passing ``expected_version`` to
``update`` turns last-writer-wins into an optimistic concurrency check.

The SQLite-backed equivalents live in db_stores.py.
"""

from __future__ import annotations

import copy
import logging
from typing import Callable, Iterable, Optional

from attendance import AttendanceRecord
from students import Notification, Student

logger = logging.getLogger(__name__)


class StaleRecordError(Exception):
    """Raised when a record changed since the caller read it."""

    def __init__(self, student_id: str, expected: int, actual: int):
        super().__init__(
            f"Student {student_id} is at version {actual}, expected {expected}"
        )
        self.student_id = student_id
        self.expected = expected
        self.actual = actual


class StudentDirectory:
    """Keyed collection of Student records."""

    def load_all(self) -> list[Student]:
        raise NotImplementedError

    def save_all(self, students: list[Student]) -> None:
        raise NotImplementedError

    def get(self, student_id: str) -> Optional[Student]:
        for student in self.load_all():
            if student.id == student_id:
                return student
        return None

    def list_active(self) -> list[Student]:
        return [s for s in self.load_all() if s.active]

    def add(self, student: Student) -> Student:
        students = self.load_all()
        if any(s.id == student.id for s in students):
            raise ValueError(f"Student {student.id} already exists")
        students.append(student)
        self.save_all(students)
        return student

    def update(
        self,
        student_id: str,
        mutate: Callable[[Student], object],
        expected_version: Optional[int] = None,
    ) -> Optional[Student]:
        """Apply ``mutate`` to a copy of one record and rewrite the collection.

        Returns the updated record, or None (and writes nothing) when the
        id is unknown.
        """
        students = self.load_all()
        for index, current in enumerate(students):
            if current.id != student_id:
                continue
            if expected_version is not None and current.version != expected_version:
                raise StaleRecordError(student_id, expected_version, current.version)
            updated = copy.deepcopy(current)
            mutate(updated)
            updated.version = current.version + 1
            students[index] = updated
            self.save_all(students)
            return updated

        logger.warning("Student %s not found; update skipped", student_id)
        return None


class AttendanceLog:
    """Read-mostly log of attendance entries, keyed by student."""

    def records_for(self, student_id: str) -> list[AttendanceRecord]:
        raise NotImplementedError

    def add(self, record: AttendanceRecord) -> None:
        raise NotImplementedError


class NotificationStore:
    """Per-student inbox of exam notifications."""

    def add(self, notification: Notification) -> None:
        raise NotImplementedError

    def for_student(self, student_id: str, n: int = 20) -> list[Notification]:
        raise NotImplementedError


# ── In-memory implementations ────────────────────────────────────────


class InMemoryStudentDirectory(StudentDirectory):
    """Keeps serialized payloads so reads never alias stored objects."""

    def __init__(self, students: Iterable[Student] = ()):
        self._payloads: list[dict] = [s.to_dict() for s in students]

    def load_all(self) -> list[Student]:
        return [Student.from_dict(p) for p in self._payloads]

    def save_all(self, students: list[Student]) -> None:
        self._payloads = [s.to_dict() for s in students]


class InMemoryAttendanceLog(AttendanceLog):
    def __init__(self, records: Iterable[AttendanceRecord] = ()):
        self._records: list[AttendanceRecord] = list(records)

    def records_for(self, student_id: str) -> list[AttendanceRecord]:
        return [r for r in self._records if r.student_id == student_id]

    def add(self, record: AttendanceRecord) -> None:
        self._records.append(record)


class InMemoryNotificationStore(NotificationStore):
    def __init__(self):
        self._items: list[Notification] = []

    def add(self, notification: Notification) -> None:
        self._items.append(notification)

    def for_student(self, student_id: str, n: int = 20) -> list[Notification]:
        items = [x for x in self._items if x.student_id == student_id]
        items.sort(key=lambda x: x.created_at, reverse=True)
        return items[:n]
