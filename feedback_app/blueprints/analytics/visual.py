from flask import jsonify
from . import visual_bp as bp
from feedback_app.extensions import db
from feedback_app.services import visual_analytics as svc
from feedback_app.utils.validators import require_uuid


@bp.get("/faculty/<faculty_id>/grouped-bar")
def grouped_bar(faculty_id):
    return jsonify(svc.grouped_bar_chart_data(db.session, require_uuid(faculty_id, "faculty_id"))), 200


@bp.get("/faculty/<faculty_id>/line-chart")
def line_chart(faculty_id):
    return jsonify(svc.faculty_line_chart_data(db.session, require_uuid(faculty_id, "faculty_id"))), 200


@bp.get("/faculty/<faculty_id>/radar")
def radar(faculty_id):
    return jsonify(svc.faculty_radar_data(db.session, require_uuid(faculty_id, "faculty_id"))), 200


@bp.get("/faculties")
def faculties():
    return jsonify(svc.unique_faculties_with_responses(db.session)), 200


@bp.get("/subjects")
def subjects():
    return jsonify(svc.unique_subjects_with_responses(db.session)), 200


@bp.get("/subjects/<subject_id>/performance")
def subject_performance(subject_id):
    return jsonify(svc.subject_performance_data(db.session, require_uuid(subject_id, "subject_id"))), 200
