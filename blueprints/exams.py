"""Exam eligibility, result and reminder routes."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from extensions import get_engine, get_settings
from grade_ladder import CATEGORIES, get_grade, grades_for
from stores import StaleRecordError

logger = logging.getLogger(__name__)

bp = Blueprint("exams", __name__)


class BadRequest(ValueError):
    pass


def _expected_version():
    """Parse an If-Match header carrying a record version, e.g. '"3"'."""
    raw = request.headers.get("If-Match", "").strip()
    if not raw:
        return None
    try:
        return int(raw.strip('"'))
    except ValueError:
        raise BadRequest("If-Match must carry an integer record version")


def _request_settings():
    """App settings with any query-string overrides applied."""
    return get_settings().with_overrides(request.args.to_dict())


def _summary(engine, student) -> dict:
    upcoming = engine.next_grade(student)
    computed = engine.next_exam_date(student)
    return {
        "id": student.id,
        "name": student.name,
        "category": student.category,
        "grade": student.grade.to_dict() if student.grade else None,
        "belt": student.belt,
        "nextExamDate": student.next_exam_date.isoformat() if student.next_exam_date else None,
        "computedExamDate": computed.isoformat() if computed else None,
        "examEnabled": student.exam_enabled,
        "nextGrade": upcoming.to_dict() if upcoming else None,
        "version": student.version,
    }


@bp.errorhandler(BadRequest)
def _bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp.errorhandler(StaleRecordError)
def _stale(e):
    return jsonify({"error": str(e), "version": e.actual}), 409


@bp.route("/api/grades/<category>")
def api_grades(category):
    if category not in CATEGORIES:
        return jsonify({"error": f"Unknown category: {category}"}), 404
    return jsonify({"category": category, "grades": [g.to_dict() for g in grades_for(category)]})


@bp.route("/api/settings/exam")
def api_exam_settings():
    settings = get_settings()
    return jsonify({"settings": settings.to_dict(), "totalFee": settings.total_fee})


@bp.route("/api/students/<student_id>/exam-status")
def api_exam_status(student_id):
    engine = get_engine()
    student = engine.students.get(student_id)
    if student is None:
        return jsonify({"error": "Student not found"}), 404

    settings = _request_settings()
    status = _summary(engine, student)
    status.update({
        "eligible": engine.is_exam_enabled(student, settings),
        "attendancePercentage": engine.attendance_percentage(
            student.id, settings.attendance_check_months
        ),
        "canNotify": engine.can_notify(student),
        "notificationMessage": engine.notification_message(student),
        "fees": {
            "examFee": settings.exam_fee,
            "beltFee": settings.belt_fee,
            "total": settings.total_fee,
        },
    })
    response = jsonify(status)
    response.headers["ETag"] = f'"{student.version}"'
    return response


@bp.route("/api/students/<student_id>/exam-result", methods=["POST"])
def api_exam_result(student_id):
    data = request.get_json(silent=True) or {}
    examiner = str(data.get("examiner", "")).strip()
    if not examiner:
        return jsonify({"error": "examiner is required"}), 400
    if not isinstance(data.get("passed"), bool):
        return jsonify({"error": "passed must be true or false"}), 400

    engine = get_engine()
    student = engine.students.get(student_id)
    if student is None:
        return jsonify({"error": "Student not found"}), 404

    if data.get("gradeId") is not None:
        if not isinstance(data["gradeId"], str):
            return jsonify({"error": "gradeId must be a string"}), 400
        new_grade = get_grade(data["gradeId"])
        if new_grade is None or new_grade.category != student.category:
            return jsonify({"error": f"Unknown grade for this student: {data['gradeId']}"}), 400
    else:
        new_grade = engine.next_grade(student)
        if new_grade is None:
            return jsonify({"error": "Student already holds the highest grade"}), 409

    updated = engine.record_exam_result(
        student_id, new_grade, examiner, data["passed"],
        expected_version=_expected_version(),
    )
    if updated is None:
        return jsonify({"error": "Student not found"}), 404
    return jsonify({"success": True, "student": _summary(engine, updated)})


@bp.route("/api/students/<student_id>/retake", methods=["POST"])
def api_schedule_retake(student_id):
    engine = get_engine()
    updated = engine.schedule_retake_exam(student_id, expected_version=_expected_version())
    if updated is None:
        return jsonify({"error": "Student not found"}), 404
    return jsonify({"success": True, "student": _summary(engine, updated)})


@bp.route("/api/students/<student_id>/exam-reminder", methods=["POST"])
def api_exam_reminder(student_id):
    engine = get_engine()
    student = engine.students.get(student_id)
    if student is None:
        return jsonify({"error": "Student not found"}), 404
    if not engine.send_exam_reminder(student_id):
        return jsonify({"error": "A reminder cannot be sent right now"}), 409
    return jsonify({"success": True, "message": engine.notification_message(student)})


@bp.route("/api/students/<student_id>/notifications")
def api_student_notifications(student_id):
    engine = get_engine()
    if engine.students.get(student_id) is None:
        return jsonify({"error": "Student not found"}), 404
    items = engine.notifications.for_student(student_id)
    return jsonify({"notifications": [n.to_dict() for n in items]})


@bp.route("/api/exams/eligible")
def api_eligible_students():
    engine = get_engine()
    students = engine.students_eligible_for_exam(_request_settings())
    return jsonify({"students": [_summary(engine, s) for s in students]})


@bp.route("/api/exams/overdue")
def api_overdue_students():
    engine = get_engine()
    return jsonify({"students": [_summary(engine, s) for s in engine.overdue_students()]})


@bp.route("/api/exams/refresh", methods=["POST"])
def api_refresh_exam_status():
    refreshed = get_engine().refresh_all()
    return jsonify({"success": True, "refreshed": refreshed})
