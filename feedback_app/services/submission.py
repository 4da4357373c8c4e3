"""
Feedback submission: token guard, response + snapshot writes, one-shot access flip.

All writes for one submission share a single transaction on the given session.
Guard failures are raised before anything is written.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from feedback_app.errors import (
    ConflictError,
    ForbiddenError,
    GoneError,
    InternalError,
    InternalInconsistencyError,
    NotFoundError,
    ServiceError,
)
from feedback_app.models import (
    AcademicYear,
    Department,
    Division,
    FeedbackForm,
    FeedbackQuestion,
    FeedbackSnapshot,
    FormAccess,
    OverrideStudent,
    Semester,
    Student,
    StudentResponse,
    SubjectAllocation,
    FORM_STATUS_ACTIVE,
)
from feedback_app.observability import log_event
from feedback_app.utils.helpers import as_utc, new_uuid, safe_int, utcnow

logger = logging.getLogger(__name__)

MSG_INVALID_TOKEN = "Invalid access token."
MSG_FORM_GONE = "Form not found or is deleted."
MSG_FORM_INACTIVE = "Form is not currently active for submission."
MSG_FORM_ENDED = "Form submission period has ended."
MSG_ALREADY_SUBMITTED = "Feedback already submitted for this access token."


@dataclass(frozen=True)
class RegularRespondent:
    student: Student
    academic_year: AcademicYear
    semester: Semester
    department: Department
    division: Division


@dataclass(frozen=True)
class OverrideRespondent:
    override_student: OverrideStudent


Respondent = Union[RegularRespondent, OverrideRespondent]


@dataclass(frozen=True)
class FormAccessContext:
    access: FormAccess
    form: FeedbackForm
    allocation: SubjectAllocation
    respondent: Respondent


def _load_access(session: Session, token: str) -> FormAccess:
    access = session.query(FormAccess).filter(FormAccess.access_token == token).first()
    if access is None:
        raise NotFoundError(MSG_INVALID_TOKEN)
    if access.form is None or access.form.is_deleted:
        raise GoneError(MSG_FORM_GONE)
    return access


def _resolve_respondent(access: FormAccess) -> Respondent:
    has_student = access.student_id is not None
    has_override = access.override_student_id is not None
    if has_student == has_override:
        logger.error("form_access %s references %s respondents", access.id, "both" if has_student else "no")
        raise InternalInconsistencyError("Form access must reference exactly one respondent.")

    if has_override:
        if access.override_student is None:
            raise InternalInconsistencyError("Missing override student data for snapshot creation.")
        return OverrideRespondent(override_student=access.override_student)

    student = access.student
    if (
        student is None
        or student.academic_year is None
        or student.semester is None
        or student.division is None
        or student.semester.department is None
    ):
        raise InternalInconsistencyError("Missing essential student data for snapshot creation.")
    return RegularRespondent(
        student=student,
        academic_year=student.academic_year,
        semester=student.semester,
        department=student.semester.department,
        division=student.division,
    )


def validate_submission(session: Session, token: str, now: Optional[datetime] = None) -> FormAccessContext:
    """
    Check that `token` may submit right now and resolve everything the snapshot needs.

    Raises NotFoundError, GoneError, ForbiddenError, ConflictError or
    InternalInconsistencyError; nothing is written.
    """
    now = now or utcnow()
    access = _load_access(session, token)
    form = access.form

    if form.status != FORM_STATUS_ACTIVE:
        raise ForbiddenError(MSG_FORM_INACTIVE)
    end = as_utc(form.end_date)
    if end is not None and now > end:
        raise ForbiddenError(MSG_FORM_ENDED)
    if access.is_submitted:
        raise ConflictError(MSG_ALREADY_SUBMITTED)

    allocation = form.subject_allocation
    if allocation is None or allocation.faculty is None or allocation.subject is None:
        logger.error("form %s has no usable subject allocation", form.id)
        raise InternalInconsistencyError("Missing essential form data for snapshot creation.")

    return FormAccessContext(
        access=access,
        form=form,
        allocation=allocation,
        respondent=_resolve_respondent(access),
    )


def _respondent_fields(ctx: FormAccessContext) -> Dict[str, Any]:
    """Identity + academic placement columns of the snapshot."""
    r = ctx.respondent
    if isinstance(r, RegularRespondent):
        s = r.student
        return dict(
            student_id=s.id,
            override_student_id=None,
            is_override_student=False,
            student_enrollment_number=s.enrollment_number,
            student_name=s.name,
            student_email=s.email,
            academic_year_id=r.academic_year.id,
            academic_year_string=r.academic_year.year_string,
            academic_year_is_deleted=bool(r.academic_year.is_deleted),
            department_id=r.department.id,
            department_name=r.department.name,
            department_abbreviation=r.department.abbreviation,
            department_is_deleted=bool(r.department.is_deleted),
            semester_id=r.semester.id,
            semester_number=r.semester.semester_number,
            semester_is_deleted=bool(r.semester.is_deleted),
            division_id=r.division.id,
            division_name=r.division.division_name,
            division_is_deleted=bool(r.division.is_deleted),
        )

    if isinstance(r, OverrideRespondent):
        o = r.override_student
        # No placement of their own; borrow the chain of the division the form was allocated to
        division = ctx.allocation.division
        semester = division.semester if division is not None else None
        department = semester.department if semester is not None else None
        year = semester.academic_year if semester is not None else None
        return dict(
            student_id=None,
            override_student_id=o.id,
            is_override_student=True,
            student_enrollment_number=o.enrollment_number or "",
            student_name=o.name,
            student_email=o.email,
            academic_year_id=year.id if year else None,
            academic_year_string=year.year_string if year else None,
            academic_year_is_deleted=bool(year and year.is_deleted),
            department_id=semester.department_id if semester else None,
            department_name=(department.name if department else None) or o.department or "",
            department_abbreviation=department.abbreviation if department else None,
            department_is_deleted=bool(department and department.is_deleted),
            semester_id=semester.id if semester else None,
            semester_number=(semester.semester_number if semester else None) or safe_int(o.semester, 0),
            semester_is_deleted=bool(semester and semester.is_deleted),
            division_id=division.id if division else None,
            division_name=division.division_name if division else None,
            division_is_deleted=bool(division and division.is_deleted),
        )

    raise InternalInconsistencyError("Unable to determine student type for snapshot creation.")


def _build_snapshot(ctx: FormAccessContext, response: StudentResponse, question: FeedbackQuestion) -> FeedbackSnapshot:
    form = ctx.form
    faculty = question.faculty
    subject = question.subject
    category = question.category
    return FeedbackSnapshot(
        original_student_response_id=response.id,
        form_id=form.id,
        form_name=form.title,
        form_status=form.status,
        form_is_deleted=bool(form.is_deleted),
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        question_category_id=category.id if category else None,
        question_category_name=category.category_name if category else None,
        question_batch=question.batch,
        question_is_deleted=bool(question.is_deleted),
        faculty_id=faculty.id if faculty else None,
        faculty_name=faculty.name if faculty else None,
        faculty_email=faculty.email if faculty else None,
        faculty_abbreviation=(faculty.abbreviation or "") if faculty else "",
        subject_id=subject.id if subject else None,
        subject_name=subject.name if subject else None,
        subject_abbreviation=subject.abbreviation if subject else None,
        subject_code=subject.subject_code if subject else None,
        subject_is_deleted=bool(subject and subject.is_deleted),
        response_value=response.response_value,
        batch=question.batch,
        submitted_at=response.submitted_at,
        is_deleted=False,
        **_respondent_fields(ctx),
    )


def mark_submitted(session: Session, access_id: str) -> None:
    """
    Flip form_access.is_submitted false -> true.

    The WHERE clause makes this the single arbiter between racing submissions:
    whoever updates zero rows lost and gets a ConflictError.
    """
    result = session.execute(
        update(FormAccess)
        .where(FormAccess.id == access_id, FormAccess.is_submitted.is_(False))
        .values(is_submitted=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ConflictError(MSG_ALREADY_SUBMITTED)


def submit_responses(
    session: Session,
    token: str,
    answers: Dict[str, Any],
    now: Optional[datetime] = None,
) -> List[StudentResponse]:
    """
    Record one respondent's answers for the form behind `token`.

    Answers for questions that are not on the form, or are soft-deleted, are
    dropped. Returns the created StudentResponse rows (committed).
    """
    now = now or utcnow()
    form_id = None
    try:
        ctx = validate_submission(session, token, now=now)
        form_id = ctx.form.id

        question_ids = list(answers.keys())
        questions = (
            session.query(FeedbackQuestion)
            .filter(FeedbackQuestion.form_id == form_id)
            .filter(FeedbackQuestion.is_deleted.is_(False))
            .filter(FeedbackQuestion.id.in_(question_ids))
            .all()
        )
        by_id = {q.id: q for q in questions}

        skipped = [qid for qid in question_ids if qid not in by_id]
        if skipped:
            logger.warning(
                "form %s: skipping %d answer(s) for unknown or deleted questions: %s",
                form_id, len(skipped), ", ".join(map(str, skipped)),
            )

        pairs = []
        for qid, value in answers.items():
            question = by_id.get(qid)
            if question is None:
                continue
            response = StudentResponse(
                id=new_uuid(),
                student_id=ctx.access.student_id,
                override_student_id=ctx.access.override_student_id,
                feedback_form_id=form_id,
                question_id=question.id,
                response_value=json.dumps(value),
                submitted_at=now,
                is_deleted=False,
            )
            session.add(response)
            pairs.append((response, question))

        # responses must exist before the snapshots referencing them
        session.flush()
        for response, question in pairs:
            session.add(_build_snapshot(ctx, response, question))
        session.flush()

        mark_submitted(session, ctx.access.id)
        session.commit()
    except ServiceError:
        session.rollback()
        raise
    except IntegrityError as e:
        session.rollback()
        logger.warning("duplicate submission for form %s: %s", form_id, e.orig)
        raise ConflictError(MSG_ALREADY_SUBMITTED) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("feedback submission failed for form %s", form_id)
        raise InternalError("Failed to submit feedback.") from e

    log_event(
        logger,
        "feedback_submitted",
        form_id=form_id,
        token_suffix=token[-6:],
        respondent="override" if isinstance(ctx.respondent, OverrideRespondent) else "student",
        responses=len(pairs),
        skipped=len(skipped),
    )
    return [response for response, _ in pairs]


def check_submission_status(session: Session, token: str) -> Dict[str, bool]:
    access = _load_access(session, token)
    return {"is_submitted": bool(access.is_submitted)}
