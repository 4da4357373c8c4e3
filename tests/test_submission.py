import json
from datetime import timedelta

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from feedback_app.errors import (
    ConflictError,
    ForbiddenError,
    GoneError,
    InternalError,
    InternalInconsistencyError,
    NotFoundError,
)
from feedback_app.extensions import db
from feedback_app.models import (
    FeedbackForm,
    FeedbackSnapshot,
    FormAccess,
    StudentResponse,
    SubjectAllocation,
    FORM_STATUS_DRAFT,
)
from feedback_app.services import submission
from feedback_app.services.submission import (
    OverrideRespondent,
    RegularRespondent,
    check_submission_status,
    mark_submitted,
    submit_responses,
    validate_submission,
)
from feedback_app.utils.helpers import new_uuid, utcnow


def _counts():
    return (
        db.session.query(StudentResponse).count(),
        db.session.query(FeedbackSnapshot).count(),
    )


def test_submit_only_keeps_live_questions_of_the_form(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        answers = {
            world.q_rating: 4,
            world.q_text: "Great pace",
            world.q_deleted: 1,          # soft-deleted question
            world.q_lab_form: 5,         # question of another form
            new_uuid(): 3,               # unknown question
        }
        created = submit_responses(db.session, token, answers)

        assert {r.question_id for r in created} == {world.q_rating, world.q_text}
        assert _counts() == (2, 2)


def test_response_values_are_stored_as_json(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        submit_responses(db.session, token, {
            world.q_rating: 4,
            world.q_text: "Great pace",
            world.q_lab: {"score": 3, "note": "ok"},
        })
        stored = {r.question_id: r.response_value for r in db.session.query(StudentResponse).all()}
        assert stored[world.q_rating] == "4"
        assert stored[world.q_text] == '"Great pace"'
        assert json.loads(stored[world.q_lab]) == {"score": 3, "note": "ok"}


def test_each_response_has_one_matching_snapshot(app, world, enroll):
    with app.app_context():
        student_id, token = enroll(batch="B2")
        created = submit_responses(db.session, token, {world.q_rating: 5, world.q_lab: 2})

        for response in created:
            snaps = (
                db.session.query(FeedbackSnapshot)
                .filter_by(original_student_response_id=response.id)
                .all()
            )
            assert len(snaps) == 1
            snap = snaps[0]
            assert snap.response_value == response.response_value
            assert snap.question_id == response.question_id
            assert snap.student_id == student_id
            assert snap.is_override_student is False
            assert snap.academic_year_string == "2024-25"
            assert snap.department_name == "Computer Engineering"
            assert snap.semester_number == 3
            assert snap.division_name == "A"
            assert snap.subject_name == "Data Structures"
            assert snap.subject_code == "CE301"
            assert snap.faculty_name == "Dr. Rao"
            assert snap.form_name == "DS Lecture Feedback"
            assert snap.form_is_deleted is False
            assert snap.form_deleted is False

        lab_snap = db.session.query(FeedbackSnapshot).filter_by(question_id=world.q_lab).one()
        # batch comes from the question, not the student
        assert lab_snap.batch == "B1"
        assert lab_snap.question_batch == "B1"
        assert lab_snap.question_category_name == "Laboratory Skills"


def test_second_submission_conflicts_and_writes_nothing(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        submit_responses(db.session, token, {world.q_rating: 4})
        assert _counts() == (1, 1)

        with pytest.raises(ConflictError) as exc:
            submit_responses(db.session, token, {world.q_text: "again"})
        assert exc.value.message == "Feedback already submitted for this access token."
        assert _counts() == (1, 1)

        access = db.session.query(FormAccess).filter_by(access_token=token).one()
        assert access.is_submitted is True


def test_lost_race_rolls_back_every_write(app, world, enroll, monkeypatch):
    real_validate = submission.validate_submission

    def validate_then_lose_race(session, token, now=None):
        ctx = real_validate(session, token, now=now)
        # a concurrent submission flips the flag after our guard passed
        session.execute(update(FormAccess).where(FormAccess.id == ctx.access.id).values(is_submitted=True))
        return ctx

    monkeypatch.setattr(submission, "validate_submission", validate_then_lose_race)

    with app.app_context():
        _, token = enroll()
        with pytest.raises(ConflictError):
            submit_responses(db.session, token, {world.q_rating: 4, world.q_text: "x"})
        assert _counts() == (0, 0)


def test_mark_submitted_only_flips_once(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        access = db.session.query(FormAccess).filter_by(access_token=token).one()

        mark_submitted(db.session, access.id)
        with pytest.raises(ConflictError):
            mark_submitted(db.session, access.id)
        db.session.commit()


def test_override_respondent_uses_allocation_division_chain(app, world, grant):
    with app.app_context():
        token = grant(override_student_id=world.override_id)
        ctx = validate_submission(db.session, token)
        assert isinstance(ctx.respondent, OverrideRespondent)

        created = submit_responses(db.session, token, {world.q_rating: 5})
        assert created[0].student_id is None
        assert created[0].override_student_id == world.override_id

        snap = db.session.query(FeedbackSnapshot).one()
        assert snap.is_override_student is True
        assert snap.student_id is None
        assert snap.override_student_id == world.override_id
        assert snap.student_enrollment_number == "OV001"
        assert snap.academic_year_id == world.year_id
        assert snap.department_name == "Computer Engineering"
        assert snap.semester_number == 3
        assert snap.division_id == world.division_id


def test_override_falls_back_to_free_text_placement(app, world, grant):
    with app.app_context():
        # allocation points at a division that does not exist
        db.session.execute(
            update(SubjectAllocation)
            .where(SubjectAllocation.id == world.allocation_id)
            .values(division_id=new_uuid())
        )
        db.session.commit()

        token = grant(override_student_id=world.override_id)
        submit_responses(db.session, token, {world.q_rating: 3})

        snap = db.session.query(FeedbackSnapshot).one()
        assert snap.department_name == "Mechanical"
        assert snap.semester_number == 5
        assert snap.academic_year_id is None
        assert snap.division_id is None


def test_regular_respondent_is_resolved_with_full_placement(app, world, enroll):
    with app.app_context():
        student_id, token = enroll()
        ctx = validate_submission(db.session, token)
        assert isinstance(ctx.respondent, RegularRespondent)
        assert ctx.respondent.student.id == student_id
        assert ctx.respondent.department.name == "Computer Engineering"
        assert ctx.allocation.id == world.allocation_id


def test_guard_unknown_token(app, world):
    with app.app_context():
        with pytest.raises(NotFoundError) as exc:
            validate_submission(db.session, "no-such-token")
        assert exc.value.message == "Invalid access token."


def test_guard_deleted_form_is_gone(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        db.session.get(FeedbackForm, world.form_id).is_deleted = True
        db.session.commit()
        with pytest.raises(GoneError):
            validate_submission(db.session, token)
        with pytest.raises(GoneError):
            submit_responses(db.session, token, {world.q_rating: 4})
        assert _counts() == (0, 0)


def test_guard_inactive_form_is_forbidden(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        db.session.get(FeedbackForm, world.form_id).status = FORM_STATUS_DRAFT
        db.session.commit()
        with pytest.raises(ForbiddenError) as exc:
            validate_submission(db.session, token)
        assert exc.value.message == "Form is not currently active for submission."


def test_guard_after_end_date_is_forbidden(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        later = utcnow() + timedelta(days=30)
        with pytest.raises(ForbiddenError) as exc:
            validate_submission(db.session, token, now=later)
        assert exc.value.message == "Form submission period has ended."


def test_guard_student_without_placement_is_inconsistent(app, world, enroll):
    with app.app_context():
        _, token = enroll(semester_id=None)
        with pytest.raises(InternalInconsistencyError):
            submit_responses(db.session, token, {world.q_rating: 4})
        assert _counts() == (0, 0)


def test_guard_allocation_without_faculty_is_inconsistent(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        db.session.execute(
            update(SubjectAllocation)
            .where(SubjectAllocation.id == world.allocation_id)
            .values(faculty_id=new_uuid())
        )
        db.session.commit()
        with pytest.raises(InternalInconsistencyError):
            validate_submission(db.session, token)


def test_check_submission_status(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        assert check_submission_status(db.session, token) == {"is_submitted": False}
        submit_responses(db.session, token, {world.q_rating: 4})
        assert check_submission_status(db.session, token) == {"is_submitted": True}

        with pytest.raises(NotFoundError):
            check_submission_status(db.session, "missing")

        db.session.get(FeedbackForm, world.form_id).is_deleted = True
        db.session.commit()
        with pytest.raises(GoneError):
            check_submission_status(db.session, token)


def test_duplicate_answer_through_a_second_access_row_conflicts(app, world, enroll, grant):
    with app.app_context():
        student_id, first = enroll()
        second = grant(student_id=student_id)
        submit_responses(db.session, first, {world.q_rating: 4})

        # the guard passes for the second token; the unique (student, question) key does not
        with pytest.raises(ConflictError) as exc:
            submit_responses(db.session, second, {world.q_rating: 1})
        assert exc.value.message == "Feedback already submitted for this access token."
        assert _counts() == (1, 1)

        access = db.session.query(FormAccess).filter_by(access_token=second).one()
        assert access.is_submitted is False


def test_storage_failure_mid_submission_is_internal_and_rolled_back(app, world, enroll, monkeypatch):
    def failing_snapshot(ctx, response, question):
        raise OperationalError("INSERT INTO feedback_snapshots", {}, Exception("disk I/O error"))

    monkeypatch.setattr(submission, "_build_snapshot", failing_snapshot)

    with app.app_context():
        _, token = enroll()
        with pytest.raises(InternalError) as exc:
            submit_responses(db.session, token, {world.q_rating: 4, world.q_text: "x"})
        assert exc.value.message == "Failed to submit feedback."
        assert _counts() == (0, 0)
        assert check_submission_status(db.session, token) == {"is_submitted": False}


def test_non_string_answer_keys_are_skipped(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        created = submit_responses(db.session, token, {123: 4, world.q_rating: 5})
        assert [r.question_id for r in created] == [world.q_rating]
        assert _counts() == (1, 1)


def test_guard_failure_leaves_no_open_transaction(app, world, enroll):
    with app.app_context():
        _, token = enroll()
        db.session.get(FeedbackForm, world.form_id).status = FORM_STATUS_DRAFT
        db.session.commit()

        with pytest.raises(ForbiddenError):
            submit_responses(db.session, token, {world.q_rating: 4})
        assert not db.session.in_transaction()
