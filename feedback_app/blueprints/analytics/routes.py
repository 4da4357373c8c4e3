from flask import jsonify, request
from . import bp
from feedback_app.extensions import db
from feedback_app.services import analytics as svc
from feedback_app.utils.validators import clean_str, optional_uuid, require_uuid


def _uuid_arg(name: str):
    return optional_uuid(request.args.get(name), name)


def _flag_arg(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in ("1", "true", "yes", "on")


@bp.get("/semesters/<semester_id>/overall-rating")
def overall_rating(semester_id):
    data = svc.overall_semester_rating(
        db.session,
        require_uuid(semester_id, "semester_id"),
        division_id=_uuid_arg("division_id"),
        batch=clean_str(request.args.get("batch"), 32),
    )
    return jsonify(data), 200


@bp.get("/semesters-with-responses")
def semesters_with_responses():
    data = svc.semesters_with_responses(
        db.session,
        academic_year_id=_uuid_arg("academic_year_id"),
        department_id=_uuid_arg("department_id"),
    )
    return jsonify(data), 200


@bp.get("/semesters/<semester_id>/subject-ratings")
def subject_ratings(semester_id):
    data = svc.subject_wise_lecture_lab_rating(
        db.session,
        require_uuid(semester_id, "semester_id"),
        academic_year_id=_uuid_arg("academic_year_id"),
    )
    return jsonify(data), 200


@bp.get("/semesters/<semester_id>/high-impact-areas")
def high_impact_areas(semester_id):
    data = svc.high_impact_feedback_areas(db.session, require_uuid(semester_id, "semester_id"))
    return jsonify(data), 200


@bp.get("/trends/semester")
def semester_trends():
    data = svc.semester_trend_analysis(
        db.session,
        subject_id=_uuid_arg("subject_id"),
        academic_year_id=_uuid_arg("academic_year_id"),
    )
    return jsonify(data), 200


@bp.get("/trends/annual")
def annual_trends():
    return jsonify(svc.annual_performance_trend(db.session)), 200


@bp.get("/semesters/<semester_id>/division-batch-comparisons")
def division_batch_comparisons(semester_id):
    data = svc.division_batch_comparisons(db.session, require_uuid(semester_id, "semester_id"))
    return jsonify(data), 200


@bp.get("/semesters/<semester_id>/lab-lecture-comparison")
def lab_lecture_comparison(semester_id):
    data = svc.lab_lecture_comparison(db.session, require_uuid(semester_id, "semester_id"))
    return jsonify(data), 200


@bp.get("/faculty/<faculty_id>/performance/<academic_year_id>")
def faculty_performance(faculty_id, academic_year_id):
    data = svc.faculty_performance_year_data(
        db.session,
        require_uuid(academic_year_id, "academic_year_id"),
        require_uuid(faculty_id, "faculty_id"),
    )
    return jsonify(data), 200


@bp.get("/faculty/performance/<academic_year_id>")
def all_faculty_performance(academic_year_id):
    data = svc.all_faculty_performance_data(db.session, require_uuid(academic_year_id, "academic_year_id"))
    return jsonify(data), 200


@bp.get("/total-responses")
def total_responses():
    return jsonify({"total_responses": svc.total_responses(db.session)}), 200


@bp.get("/semester-divisions")
def semester_divisions():
    return jsonify(svc.semester_divisions_with_response_counts(db.session)), 200


@bp.get("/filter-dictionary")
def filter_dictionary():
    return jsonify(svc.filter_dictionary(db.session)), 200


@bp.get("/complete")
def complete_analytics():
    """All dashboard datasets in one payload; every filter is optional."""
    data = svc.complete_analytics_data(
        db.session,
        academic_year_id=_uuid_arg("academic_year_id"),
        department_id=_uuid_arg("department_id"),
        subject_id=_uuid_arg("subject_id"),
        semester_id=_uuid_arg("semester_id"),
        division_id=_uuid_arg("division_id"),
        lecture_type=(clean_str(request.args.get("lecture_type"), 16) or "").upper() or None,
        include_deleted=_flag_arg("include_deleted"),
    )
    return jsonify(data), 200
