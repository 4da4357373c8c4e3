"""Chart-shaped views over live responses (bar, line, radar, per-subject breakdown)."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from feedback_app.errors import NotFoundError, translate_storage_errors
from feedback_app.models import (
    Division,
    Faculty,
    FeedbackForm,
    FeedbackQuestion,
    QuestionCategory,
    Semester,
    StudentResponse,
    Subject,
    SubjectAllocation,
    LECTURE_BATCH_MARKER,
    LECTURE_TYPE_LAB,
    LECTURE_TYPE_LECTURE,
)
from feedback_app.services.grouping import group_by
from feedback_app.services.scoring import classify_lecture_type, parse_score
from feedback_app.utils.helpers import mean_or_zero

logger = logging.getLogger(__name__)

MSG_FACULTY_NOT_FOUND = "Faculty not found or is deleted."


def _live_faculty(session: Session, faculty_id: str) -> Faculty:
    faculty = (
        session.query(Faculty)
        .filter(Faculty.id == faculty_id, Faculty.is_deleted.is_(False))
        .first()
    )
    if faculty is None:
        raise NotFoundError(MSG_FACULTY_NOT_FOUND)
    return faculty


def _live_responses(session: Session, *columns):
    """Live responses to live questions, with the question's category outer-joined."""
    return (
        session.query(StudentResponse.id, StudentResponse.response_value, *columns)
        .join(FeedbackQuestion, FeedbackQuestion.id == StudentResponse.question_id)
        .outerjoin(QuestionCategory, QuestionCategory.id == FeedbackQuestion.category_id)
        .filter(StudentResponse.is_deleted.is_(False))
        .filter(FeedbackQuestion.is_deleted.is_(False))
    )


def _numeric_rows(rows) -> List[Any]:
    """Pair each row with its score, dropping rows whose value is not numeric."""
    out = []
    for row in rows:
        score = parse_score(row.response_value)
        if score is None:
            logger.debug("skipping response %s: non-numeric value", row.id)
            continue
        out.append((row, score))
    return out


def _split_by_type(scored) -> Dict[str, float]:
    by_type = group_by(scored, lambda rs: classify_lecture_type(rs[0].category_name, rs[0].batch))
    return {
        "lecture": mean_or_zero(s for _, s in by_type.get(LECTURE_TYPE_LECTURE, [])),
        "lab": mean_or_zero(s for _, s in by_type.get(LECTURE_TYPE_LAB, [])),
    }


@translate_storage_errors("Failed to build grouped bar chart data.")
def grouped_bar_chart_data(session: Session, faculty_id: str) -> Dict[str, Any]:
    """Per subject the faculty was rated on: their average next to everyone's average."""
    faculty = _live_faculty(session, faculty_id)

    subjects = (
        session.query(Subject)
        .join(FeedbackQuestion, FeedbackQuestion.subject_id == Subject.id)
        .join(StudentResponse, StudentResponse.question_id == FeedbackQuestion.id)
        .filter(FeedbackQuestion.faculty_id == faculty_id)
        .filter(FeedbackQuestion.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
        .filter(Subject.is_deleted.is_(False))
        .distinct()
        .order_by(Subject.name)
        .all()
    )
    if not subjects:
        return {"faculty_name": faculty.name, "subjects": []}

    rows = (
        _live_responses(session, FeedbackQuestion.subject_id, FeedbackQuestion.faculty_id)
        .filter(FeedbackQuestion.subject_id.in_([s.id for s in subjects]))
        .all()
    )
    by_subject = group_by(_numeric_rows(rows), lambda rs: rs[0].subject_id)

    out = []
    for subject in subjects:
        scored = by_subject.get(subject.id, [])
        out.append({
            "subject_name": subject.name,
            "overall_average": mean_or_zero(s for _, s in scored),
            "faculty_average": mean_or_zero(s for r, s in scored if r.faculty_id == faculty_id),
        })
    return {"faculty_name": faculty.name, "subjects": out}


@translate_storage_errors("Failed to build faculty line chart data.")
def faculty_line_chart_data(session: Session, faculty_id: str) -> Dict[str, Any]:
    _live_faculty(session, faculty_id)

    rows = (
        _live_responses(session, FeedbackQuestion.batch, QuestionCategory.category_name, Semester.semester_number)
        .join(FeedbackForm, FeedbackForm.id == FeedbackQuestion.form_id)
        .join(SubjectAllocation, SubjectAllocation.id == FeedbackForm.subject_allocation_id)
        .join(Semester, Semester.id == SubjectAllocation.semester_id)
        .filter(FeedbackQuestion.faculty_id == faculty_id)
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(Semester.is_deleted.is_(False))
        .all()
    )

    by_semester = group_by(_numeric_rows(rows), lambda rs: rs[0].semester_number)
    data = []
    for semester in sorted(by_semester):
        averages = _split_by_type(by_semester[semester])
        data.append({
            "semester": semester,
            "lecture_average": averages["lecture"],
            "lab_average": averages["lab"],
        })
    return {"faculty_id": faculty_id, "performance_data": data}


@translate_storage_errors("Error fetching unique faculty list.")
def unique_faculties_with_responses(session: Session) -> List[Dict[str, Any]]:
    faculties = (
        session.query(Faculty)
        .join(FeedbackQuestion, FeedbackQuestion.faculty_id == Faculty.id)
        .join(StudentResponse, StudentResponse.question_id == FeedbackQuestion.id)
        .filter(Faculty.is_deleted.is_(False))
        .filter(FeedbackQuestion.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
        .distinct()
        .order_by(Faculty.name)
        .all()
    )
    return [{"id": f.id, "name": f.name, "abbreviation": f.abbreviation} for f in faculties]


@translate_storage_errors("Error fetching unique subject list.")
def unique_subjects_with_responses(session: Session) -> List[Dict[str, Any]]:
    subjects = (
        session.query(Subject)
        .join(FeedbackQuestion, FeedbackQuestion.subject_id == Subject.id)
        .join(StudentResponse, StudentResponse.question_id == FeedbackQuestion.id)
        .filter(Subject.is_deleted.is_(False))
        .filter(FeedbackQuestion.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
        .distinct()
        .order_by(Subject.name)
        .all()
    )
    return [
        {"id": s.id, "name": s.name, "abbreviation": s.abbreviation, "subject_code": s.subject_code}
        for s in subjects
    ]


@translate_storage_errors("Failed to build faculty radar data.")
def faculty_radar_data(session: Session, faculty_id: str) -> Dict[str, Any]:
    _live_faculty(session, faculty_id)

    rows = (
        _live_responses(session, FeedbackQuestion.batch, QuestionCategory.category_name, Subject.name.label("subject_name"))
        .join(Subject, Subject.id == FeedbackQuestion.subject_id)
        .filter(FeedbackQuestion.faculty_id == faculty_id)
        .filter(Subject.is_deleted.is_(False))
        .all()
    )

    by_subject = group_by(_numeric_rows(rows), lambda rs: rs[0].subject_name)
    labels = sorted(by_subject)
    averages = [_split_by_type(by_subject[name]) for name in labels]
    if not labels:
        return {"labels": [], "datasets": []}
    return {
        "labels": labels,
        "datasets": [
            {"label": "Lecture Ratings", "data": [a["lecture"] for a in averages]},
            {"label": "Lab Ratings", "data": [a["lab"] for a in averages]},
        ],
    }


@translate_storage_errors("Failed to build subject performance data.")
def subject_performance_data(session: Session, subject_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """Numeric answers on one subject split by faculty, division and batch; lectures and labs apart."""
    rows = (
        _live_responses(
            session,
            FeedbackQuestion.batch,
            QuestionCategory.category_name,
            Faculty.id.label("faculty_id"),
            Faculty.name.label("faculty_name"),
            Faculty.abbreviation.label("faculty_abbr"),
            Division.id.label("division_id"),
            Division.division_name,
        )
        .join(Subject, Subject.id == FeedbackQuestion.subject_id)
        .join(Faculty, Faculty.id == FeedbackQuestion.faculty_id)
        .join(FeedbackForm, FeedbackForm.id == FeedbackQuestion.form_id)
        .join(Division, Division.id == FeedbackForm.division_id)
        .filter(FeedbackQuestion.subject_id == subject_id)
        .filter(Subject.is_deleted.is_(False))
        .filter(Faculty.is_deleted.is_(False))
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(Division.is_deleted.is_(False))
        .all()
    )
    if not rows:
        raise NotFoundError("No responses found for the given subject.")

    groups = group_by(
        _numeric_rows(rows),
        lambda rs: (
            rs[0].faculty_id,
            rs[0].division_id,
            classify_lecture_type(rs[0].category_name, rs[0].batch),
            rs[0].batch,
        ),
    )

    result: Dict[str, List[Dict[str, Any]]] = {"lectures": [], "labs": []}
    for (_fid, _did, lecture_type, batch), scored in groups.items():
        first = scored[0][0]
        is_lab = lecture_type == LECTURE_TYPE_LAB
        entry = {
            "faculty_id": first.faculty_id,
            "faculty_name": first.faculty_name,
            "faculty_abbr": first.faculty_abbr,
            "division_id": first.division_id,
            "division_name": first.division_name,
            "type": lecture_type,
            "batch": batch if is_lab and batch != LECTURE_BATCH_MARKER else "-",
            "average_score": mean_or_zero(s for _, s in scored),
            "response_count": len(scored),
        }
        result["labs" if is_lab else "lectures"].append(entry)
    return result
