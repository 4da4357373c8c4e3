"""
Read-only aggregation queries over responses and their snapshots.

Every query takes the SQLAlchemy session first, filters soft-deleted rows at
each level it touches, reads answers through parse_score (skipping anything
that is not numeric) and reduces groups to a 2-decimal average plus a count.
A count is the number of rows in the group, numeric or not.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from feedback_app.errors import InvalidInputError, NotFoundError, translate_storage_errors
from feedback_app.models import (
    AcademicYear,
    Department,
    Division,
    Faculty,
    FeedbackAnalytics,
    FeedbackForm,
    FeedbackQuestion,
    FeedbackSnapshot,
    Semester,
    Student,
    StudentResponse,
    Subject,
    SubjectAllocation,
    QUESTION_TYPE_RATING,
)
from feedback_app.services.grouping import group_by
from feedback_app.services.scoring import (
    LECTURE_TYPE_LABELS,
    LOW_RATING_THRESHOLD,
    MAX_SEMESTERS,
    SIGNIFICANT_LOW_COUNT,
    classify_lecture_type,
    normalize_lecture_type,
    parse_score,
)
from feedback_app.utils.helpers import as_utc, isoformat, mean_or_none, mean_or_zero

logger = logging.getLogger(__name__)


# ---------- shared helpers ----------

def _scores(values: Iterable[Any]) -> List[float]:
    out = []
    for v in values:
        s = parse_score(v)
        if s is not None:
            out.append(s)
    return out


def _snapshot_lecture_type(s: FeedbackSnapshot) -> str:
    return classify_lecture_type(s.question_category_name, s.question_batch or s.batch)


def _live_snapshots(session: Session) -> Query:
    """Snapshots whose own flag and every mirrored hierarchy flag are clear."""
    S = FeedbackSnapshot
    return session.query(S).filter(
        S.is_deleted.is_(False),
        S.form_deleted.is_(False),
        S.form_is_deleted.is_(False),
        S.academic_year_is_deleted.is_(False),
        S.department_is_deleted.is_(False),
        S.semester_is_deleted.is_(False),
        S.division_is_deleted.is_(False),
        S.subject_is_deleted.is_(False),
        S.question_is_deleted.is_(False),
    )


def _semester_forms(session: Session, semester_id: str) -> Query:
    """Live forms whose live allocation belongs to a live semester."""
    return (
        session.query(FeedbackForm)
        .join(SubjectAllocation, SubjectAllocation.id == FeedbackForm.subject_allocation_id)
        .join(Semester, Semester.id == SubjectAllocation.semester_id)
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(SubjectAllocation.semester_id == semester_id)
        .filter(Semester.is_deleted.is_(False))
    )


def _response_counts_by_semester(session: Session) -> Dict[str, int]:
    rows = (
        session.query(SubjectAllocation.semester_id, func.count(StudentResponse.id))
        .join(FeedbackForm, FeedbackForm.subject_allocation_id == SubjectAllocation.id)
        .join(StudentResponse, StudentResponse.feedback_form_id == FeedbackForm.id)
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
        .group_by(SubjectAllocation.semester_id)
        .all()
    )
    return {semester_id: int(count) for semester_id, count in rows}


def _semester_matrix(snapshots: List[FeedbackSnapshot]) -> Dict[str, Any]:
    """
    "semester 1".."semester 8" averages plus a total over every numeric score.
    Slots without numeric data are None, not 0.
    """
    by_semester: Dict[int, List[float]] = {}
    numeric: List[float] = []
    for snap in snapshots:
        score = parse_score(snap.response_value)
        if score is None:
            logger.debug("skipping snapshot %s: non-numeric value", snap.id)
            continue
        by_semester.setdefault(snap.semester_number, []).append(score)
        numeric.append(score)

    out: Dict[str, Any] = {}
    for i in range(1, MAX_SEMESTERS + 1):
        out[f"semester {i}"] = mean_or_none(by_semester.get(i, []))
    out["total_average"] = mean_or_none(numeric)
    out["total_responses"] = len(numeric)
    return out


# ---------- queries ----------

@translate_storage_errors("Failed to calculate overall semester rating.")
def overall_semester_rating(
    session: Session,
    semester_id: str,
    division_id: Optional[str] = None,
    batch: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Mean of every numeric answer given by live students on live forms of the semester.

    Override respondents have no Student row and are not part of this figure.
    """
    q = (
        session.query(StudentResponse.response_value)
        .join(FeedbackForm, FeedbackForm.id == StudentResponse.feedback_form_id)
        .join(SubjectAllocation, SubjectAllocation.id == FeedbackForm.subject_allocation_id)
        .join(Semester, Semester.id == SubjectAllocation.semester_id)
        .join(Division, Division.id == FeedbackForm.division_id)
        .join(Student, Student.id == StudentResponse.student_id)
        .filter(StudentResponse.is_deleted.is_(False))
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(SubjectAllocation.semester_id == semester_id)
        .filter(Semester.is_deleted.is_(False))
        .filter(Division.is_deleted.is_(False))
        .filter(Student.is_deleted.is_(False))
    )
    if division_id:
        q = q.filter(Division.id == division_id)
    if batch:
        q = q.filter(Student.batch == batch)

    values = [v for (v,) in q.all()]
    if not values:
        raise NotFoundError("No responses found for the given semester and filters.")

    scores = _scores(values)
    if not scores:
        raise NotFoundError("No numeric responses found for calculation.")

    return {
        "semester_id": semester_id,
        "average_rating": mean_or_zero(scores),
        "total_responses": len(values),
    }


@translate_storage_errors("Failed to retrieve semesters with responses.")
def semesters_with_responses(
    session: Session,
    academic_year_id: Optional[str] = None,
    department_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    q = (
        session.query(Semester, func.count(StudentResponse.id))
        .join(AcademicYear, AcademicYear.id == Semester.academic_year_id)
        .join(Department, Department.id == Semester.department_id)
        .join(SubjectAllocation, SubjectAllocation.semester_id == Semester.id)
        .join(FeedbackForm, FeedbackForm.subject_allocation_id == SubjectAllocation.id)
        .join(StudentResponse, StudentResponse.feedback_form_id == FeedbackForm.id)
        .filter(Semester.is_deleted.is_(False))
        .filter(AcademicYear.is_deleted.is_(False))
        .filter(Department.is_deleted.is_(False))
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
    )
    if academic_year_id:
        q = q.filter(Semester.academic_year_id == academic_year_id)
    if department_id:
        q = q.filter(Semester.department_id == department_id)

    rows = q.group_by(Semester.id).order_by(Semester.semester_number.desc()).all()
    return [
        {
            "id": sem.id,
            "semester_number": sem.semester_number,
            "department_id": sem.department_id,
            "academic_year": {"id": sem.academic_year.id, "year_string": sem.academic_year.year_string},
            "department": {
                "id": sem.department.id,
                "name": sem.department.name,
                "abbreviation": sem.department.abbreviation,
            },
            "response_count": int(count),
        }
        for sem, count in rows
    ]


@translate_storage_errors("Failed to calculate subject-wise ratings.")
def subject_wise_lecture_lab_rating(
    session: Session,
    semester_id: str,
    academic_year_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    semester = (
        session.query(Semester)
        .filter(Semester.id == semester_id, Semester.is_deleted.is_(False))
        .first()
    )
    if semester is None:
        raise NotFoundError("Semester not found.")

    snapshots = (
        _live_snapshots(session)
        .filter(FeedbackSnapshot.semester_number == semester.semester_number)
        .filter(FeedbackSnapshot.academic_year_id == (academic_year_id or semester.academic_year_id))
        .all()
    )
    if not snapshots:
        raise NotFoundError("No feedback data found for the given semester.")

    groups = group_by(snapshots, lambda s: (s.subject_name, _snapshot_lecture_type(s)))
    out = [
        {
            "subject": subject,
            "lecture_type": lecture_type,
            "average_rating": mean_or_zero(_scores(s.response_value for s in rows)),
            "response_count": len(rows),
        }
        for (subject, lecture_type), rows in groups.items()
    ]
    return sorted(out, key=lambda r: r["subject"] or "")


@translate_storage_errors("Failed to identify high-impact feedback areas.")
def high_impact_feedback_areas(session: Session, semester_id: str) -> List[Dict[str, Any]]:
    """
    Questions with at least SIGNIFICANT_LOW_COUNT numeric answers below
    LOW_RATING_THRESHOLD, reported with their overall average.
    """
    questions = (
        session.query(FeedbackQuestion)
        .join(FeedbackForm, FeedbackForm.id == FeedbackQuestion.form_id)
        .join(SubjectAllocation, SubjectAllocation.id == FeedbackForm.subject_allocation_id)
        .join(Semester, Semester.id == SubjectAllocation.semester_id)
        .filter(FeedbackQuestion.is_deleted.is_(False))
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(SubjectAllocation.is_deleted.is_(False))
        .filter(SubjectAllocation.semester_id == semester_id)
        .filter(Semester.is_deleted.is_(False))
        .order_by(FeedbackQuestion.form_id, FeedbackQuestion.display_order)
        .all()
    )

    values_by_question: Dict[str, List[str]] = {}
    if questions:
        rows = (
            session.query(StudentResponse.question_id, StudentResponse.response_value)
            .filter(StudentResponse.question_id.in_([q.id for q in questions]))
            .filter(StudentResponse.is_deleted.is_(False))
            .all()
        )
        for qid, value in rows:
            values_by_question.setdefault(qid, []).append(value)

    flagged = []
    for question in questions:
        scores = _scores(values_by_question.get(question.id, []))
        low = [s for s in scores if s < LOW_RATING_THRESHOLD]
        if len(low) < SIGNIFICANT_LOW_COUNT:
            continue
        flagged.append({
            "question": question.text,
            "category": (question.category.category_name if question.category else None) or "N/A",
            "faculty": (question.faculty.name if question.faculty else None) or "N/A",
            "subject": (question.subject.name if question.subject else None) or "N/A",
            "low_rating_count": len(low),
            "average_rating": mean_or_zero(scores),
        })

    if not flagged:
        raise NotFoundError("No significant low-rated areas found.")
    return flagged


@translate_storage_errors("Failed to analyze semester trends.")
def semester_trend_analysis(
    session: Session,
    subject_id: Optional[str] = None,
    academic_year_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    q = _live_snapshots(session)
    if subject_id:
        q = q.filter(FeedbackSnapshot.subject_id == subject_id)
    if academic_year_id:
        q = q.filter(FeedbackSnapshot.academic_year_id == academic_year_id)
    snapshots = q.order_by(
        FeedbackSnapshot.academic_year_string,
        FeedbackSnapshot.semester_number,
        FeedbackSnapshot.subject_name,
    ).all()
    if not snapshots:
        raise NotFoundError("No trend data available for the given criteria.")

    groups = group_by(snapshots, lambda s: (s.semester_number, s.subject_name))
    trends = [
        {
            "semester": semester,
            "subject": subject,
            "average_rating": mean_or_zero(_scores(s.response_value for s in rows)),
            "response_count": len(rows),
            "academic_year_id": rows[0].academic_year_id,
            "academic_year": rows[0].academic_year_string,
        }
        for (semester, subject), rows in groups.items()
    ]
    return sorted(trends, key=lambda t: (t["semester"], t["subject"] or ""))


@translate_storage_errors("Error analyzing annual performance trends.")
def annual_performance_trend(session: Session) -> List[Dict[str, Any]]:
    rows = (
        session.query(FeedbackAnalytics)
        .filter(FeedbackAnalytics.is_deleted.is_(False))
        .order_by(FeedbackAnalytics.calculated_at)
        .all()
    )
    if not rows:
        raise NotFoundError("No annual performance data available.")

    by_year = group_by(rows, lambda r: as_utc(r.calculated_at).year)
    return [
        {
            "year": year,
            "average_rating": mean_or_zero(r.average_rating or 0 for r in items),
            "completion_rate": mean_or_zero(r.completion_rate or 0 for r in items),
        }
        for year, items in by_year.items()
    ]


@translate_storage_errors("Failed to compare divisions and batches.")
def division_batch_comparisons(session: Session, semester_id: str) -> List[Dict[str, Any]]:
    forms = (
        _semester_forms(session, semester_id)
        .join(Division, Division.id == FeedbackForm.division_id)
        .filter(Division.is_deleted.is_(False))
        .all()
    )
    if not forms:
        raise NotFoundError("No comparison data available for the given semester.")

    rows = (
        session.query(StudentResponse.feedback_form_id, StudentResponse.response_value, Student.batch)
        .join(Student, Student.id == StudentResponse.student_id)
        .filter(StudentResponse.feedback_form_id.in_([f.id for f in forms]))
        .filter(StudentResponse.is_deleted.is_(False))
        .filter(Student.is_deleted.is_(False))
        .all()
    )
    by_form = group_by(rows, lambda r: r.feedback_form_id)

    out = []
    for form in forms:
        by_batch = group_by(by_form.get(form.id, []), lambda r: r.batch or "Unknown")
        for batch, items in by_batch.items():
            out.append({
                "division": form.division.division_name,
                "batch": batch,
                "average_rating": mean_or_zero(_scores(r.response_value for r in items)),
                "response_count": len(items),
            })
    return out


@translate_storage_errors("Failed to compare lab and lecture ratings.")
def lab_lecture_comparison(session: Session, semester_id: str) -> List[Dict[str, Any]]:
    """Per allocation lecture type; answers of soft-deleted students are left out."""
    forms = _semester_forms(session, semester_id).all()
    if not forms:
        raise NotFoundError("No comparison data available for the given semester.")

    rows = (
        session.query(StudentResponse.feedback_form_id, StudentResponse.response_value)
        .outerjoin(Student, Student.id == StudentResponse.student_id)
        .filter(StudentResponse.feedback_form_id.in_([f.id for f in forms]))
        .filter(StudentResponse.is_deleted.is_(False))
        .filter(or_(StudentResponse.student_id.is_(None), Student.is_deleted.is_(False)))
        .all()
    )
    by_form = group_by(rows, lambda r: r.feedback_form_id)
    by_type = group_by(forms, lambda f: normalize_lecture_type(f.subject_allocation.lecture_type))

    out = []
    for lecture_type, type_forms in by_type.items():
        values = [r.response_value for f in type_forms for r in by_form.get(f.id, [])]
        out.append({
            "lecture_type": lecture_type,
            "average_rating": mean_or_zero(_scores(values)),
            "response_count": len(values),
            "form_count": len(type_forms),
        })
    return out


@translate_storage_errors("Failed to retrieve faculty performance data.")
def faculty_performance_year_data(session: Session, academic_year_id: str, faculty_id: str) -> Dict[str, Any]:
    snapshots = (
        _live_snapshots(session)
        .filter(FeedbackSnapshot.faculty_id == faculty_id)
        .filter(FeedbackSnapshot.academic_year_id == academic_year_id)
        .filter(FeedbackSnapshot.question_type == QUESTION_TYPE_RATING)
        .order_by(FeedbackSnapshot.semester_number)
        .all()
    )

    if not snapshots:
        faculty = session.query(Faculty).filter(Faculty.id == faculty_id, Faculty.is_deleted.is_(False)).first()
        year = (
            session.query(AcademicYear)
            .filter(AcademicYear.id == academic_year_id, AcademicYear.is_deleted.is_(False))
            .first()
        )
        return {
            "faculty_name": faculty.name if faculty else "Unknown Faculty",
            "academic_year": year.year_string if year else "Unknown Academic Year",
            **_semester_matrix([]),
        }

    return {
        "faculty_name": snapshots[0].faculty_name,
        "academic_year": snapshots[0].academic_year_string,
        **_semester_matrix(snapshots),
    }


@translate_storage_errors("Failed to retrieve faculty performance data.")
def all_faculty_performance_data(session: Session, academic_year_id: str) -> Dict[str, Any]:
    snapshots = (
        _live_snapshots(session)
        .filter(FeedbackSnapshot.academic_year_id == academic_year_id)
        .filter(FeedbackSnapshot.question_type == QUESTION_TYPE_RATING)
        .order_by(FeedbackSnapshot.faculty_id, FeedbackSnapshot.semester_number)
        .all()
    )

    if not snapshots:
        year = (
            session.query(AcademicYear)
            .filter(AcademicYear.id == academic_year_id, AcademicYear.is_deleted.is_(False))
            .first()
        )
        return {"academic_year": year.year_string if year else "Unknown Academic Year", "faculties": []}

    faculties = []
    for fid, rows in group_by(snapshots, lambda s: s.faculty_id).items():
        faculties.append({
            "faculty_id": fid,
            "faculty_name": rows[0].faculty_name,
            "academic_year": rows[0].academic_year_string,
            **_semester_matrix(rows),
        })
    return {"academic_year": snapshots[0].academic_year_string, "faculties": faculties}


@translate_storage_errors("Failed to retrieve total responses count.")
def total_responses(session: Session) -> int:
    return session.query(func.count(StudentResponse.id)).filter(StudentResponse.is_deleted.is_(False)).scalar() or 0


@translate_storage_errors("Error fetching semester divisions data.")
def semester_divisions_with_response_counts(session: Session) -> List[Dict[str, Any]]:
    """Semesters with the divisions that have at least one response; empty ones are omitted."""
    semesters = (
        session.query(Semester)
        .join(AcademicYear, AcademicYear.id == Semester.academic_year_id)
        .filter(Semester.is_deleted.is_(False))
        .filter(AcademicYear.is_deleted.is_(False))
        .order_by(Semester.semester_number)
        .all()
    )
    divisions = (
        session.query(Division)
        .filter(Division.is_deleted.is_(False))
        .order_by(Division.division_name)
        .all()
    )
    counts = dict(
        session.query(FeedbackForm.division_id, func.count(StudentResponse.id))
        .join(StudentResponse, StudentResponse.feedback_form_id == FeedbackForm.id)
        .filter(FeedbackForm.is_deleted.is_(False))
        .filter(StudentResponse.is_deleted.is_(False))
        .group_by(FeedbackForm.division_id)
        .all()
    )
    divisions_by_semester = group_by(divisions, lambda d: d.semester_id)

    out = []
    for sem in semesters:
        with_responses = [
            {
                "division_id": d.id,
                "division_name": d.division_name,
                "student_count": d.student_count,
                "response_count": int(counts[d.id]),
            }
            for d in divisions_by_semester.get(sem.id, [])
            if counts.get(d.id)
        ]
        if with_responses:
            out.append({
                "semester_id": sem.id,
                "semester_number": sem.semester_number,
                "academic_year": {"id": sem.academic_year.id, "year_string": sem.academic_year.year_string},
                "divisions": with_responses,
            })
    return out


@translate_storage_errors("Failed to retrieve filter dictionary.")
def filter_dictionary(session: Session) -> Dict[str, Any]:
    """Academic years -> departments -> (subjects, semesters -> divisions), for filter pickers."""
    years = (
        session.query(AcademicYear)
        .filter(AcademicYear.is_deleted.is_(False))
        .order_by(AcademicYear.year_string.desc())
        .all()
    )
    semesters = (
        session.query(Semester)
        .join(Department, Department.id == Semester.department_id)
        .filter(Semester.is_deleted.is_(False))
        .filter(Department.is_deleted.is_(False))
        .order_by(Department.name, Semester.semester_number)
        .all()
    )
    subjects = (
        session.query(Subject)
        .join(Semester, Semester.id == Subject.semester_id)
        .filter(Subject.is_deleted.is_(False))
        .filter(Semester.is_deleted.is_(False))
        .order_by(Subject.subject_code)
        .all()
    )
    divisions = (
        session.query(Division)
        .filter(Division.is_deleted.is_(False))
        .order_by(Division.division_name)
        .all()
    )

    sems_by_year_dept = group_by(semesters, lambda s: (s.academic_year_id, s.department_id))
    subjects_by_year_dept = group_by(subjects, lambda s: (s.semester.academic_year_id, s.semester.department_id))
    divisions_by_semester = group_by(divisions, lambda d: d.semester_id)

    academic_years = []
    for year in years:
        departments = []
        for (year_id, _dept_id), dept_sems in sems_by_year_dept.items():
            if year_id != year.id:
                continue
            dept = dept_sems[0].department
            departments.append({
                "id": dept.id,
                "name": dept.name,
                "abbreviation": dept.abbreviation,
                "subjects": [
                    {"id": s.id, "name": s.name, "code": s.subject_code, "type": s.type}
                    for s in subjects_by_year_dept.get((year.id, dept.id), [])
                ],
                "semesters": [
                    {
                        "id": sem.id,
                        "semester_number": sem.semester_number,
                        "divisions": [
                            {"id": d.id, "division_name": d.division_name}
                            for d in divisions_by_semester.get(sem.id, [])
                        ],
                    }
                    for sem in dept_sems
                ],
            })
        academic_years.append({"id": year.id, "year_string": year.year_string, "departments": departments})

    return {
        "academic_years": academic_years,
        "lecture_types": [{"value": k, "label": v} for k, v in LECTURE_TYPE_LABELS.items()],
    }


def _group_average(rows: List[FeedbackSnapshot]) -> Tuple[float, int]:
    return mean_or_zero(_scores(s.response_value for s in rows)), len(rows)


@translate_storage_errors("Failed to retrieve complete analytics data.")
def complete_analytics_data(
    session: Session,
    academic_year_id: Optional[str] = None,
    department_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    semester_id: Optional[str] = None,
    division_id: Optional[str] = None,
    lecture_type: Optional[str] = None,
    include_deleted: bool = False,
) -> Dict[str, Any]:
    """
    One-shot dashboard payload: semesters with response counts, subject ratings
    by (subject, lecture type, semester), subject trends, and the raw snapshots.
    """
    if lecture_type and lecture_type not in LECTURE_TYPE_LABELS:
        raise InvalidInputError("Invalid lecture type. Must be LECTURE or LAB.")

    # semesters
    sq = (
        session.query(Semester)
        .join(AcademicYear, AcademicYear.id == Semester.academic_year_id)
        .join(Department, Department.id == Semester.department_id)
    )
    if not include_deleted:
        sq = sq.filter(Semester.is_deleted.is_(False), Department.is_deleted.is_(False))
    if academic_year_id:
        sq = sq.filter(Semester.academic_year_id == academic_year_id)
    if department_id:
        sq = sq.filter(Semester.department_id == department_id)
    if semester_id:
        sq = sq.filter(Semester.id == semester_id)
    semesters = sq.order_by(AcademicYear.year_string.desc(), Semester.semester_number).all()

    counts = _response_counts_by_semester(session)
    semester_rows = [
        {
            "id": sem.id,
            "semester_number": sem.semester_number,
            "department_id": sem.department_id,
            "academic_year_id": sem.academic_year_id,
            "start_date": isoformat(sem.start_date),
            "end_date": isoformat(sem.end_date),
            "semester_type": sem.semester_type,
            "department": {
                "id": sem.department.id,
                "name": sem.department.name,
                "abbreviation": sem.department.abbreviation,
            },
            "academic_year": {"id": sem.academic_year.id, "year_string": sem.academic_year.year_string},
            "response_count": counts.get(sem.id, 0),
        }
        for sem in semesters
    ]

    # snapshots
    if include_deleted:
        snq = session.query(FeedbackSnapshot)
    else:
        snq = _live_snapshots(session)
    if academic_year_id:
        snq = snq.filter(FeedbackSnapshot.academic_year_id == academic_year_id)
    if department_id:
        snq = snq.filter(FeedbackSnapshot.department_id == department_id)
    if subject_id:
        snq = snq.filter(FeedbackSnapshot.subject_id == subject_id)
    if semester_id:
        snq = snq.filter(FeedbackSnapshot.semester_id == semester_id)
    if division_id:
        snq = snq.filter(FeedbackSnapshot.division_id == division_id)
    snapshots = snq.order_by(FeedbackSnapshot.semester_number, FeedbackSnapshot.subject_name).all()

    if lecture_type:
        snapshots = [s for s in snapshots if _snapshot_lecture_type(s) == lecture_type]

    subject_ratings = []
    for (subject, ltype, sem_no), rows in group_by(
        snapshots, lambda s: (s.subject_name, _snapshot_lecture_type(s), s.semester_number)
    ).items():
        avg, n = _group_average(rows)
        first = rows[0]
        subject_ratings.append({
            "subject_id": first.subject_id,
            "subject_name": subject,
            "subject_abbreviation": first.subject_abbreviation,
            "lecture_type": ltype,
            "average_rating": avg,
            "response_count": n,
            "semester_number": sem_no,
            "academic_year_id": first.academic_year_id,
            "faculty_id": first.faculty_id,
            "faculty_name": first.faculty_name,
        })

    semester_trends = []
    for (subject, sem_no), rows in group_by(snapshots, lambda s: (s.subject_name, s.semester_number)).items():
        avg, n = _group_average(rows)
        semester_trends.append({
            "subject": subject,
            "semester": sem_no,
            "average_rating": avg,
            "response_count": n,
            "academic_year_id": rows[0].academic_year_id,
            "academic_year": rows[0].academic_year_string,
        })

    return {
        "semesters": semester_rows,
        "subject_ratings": subject_ratings,
        "semester_trends": semester_trends,
        "feedback_snapshots": [s.to_dict() for s in snapshots],
    }
