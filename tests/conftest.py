import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import itertools
from datetime import timedelta
from types import SimpleNamespace

import pytest
from feedback_app import create_app
from feedback_app.extensions import db
from feedback_app.models import (
    AcademicYear,
    Department,
    Division,
    Faculty,
    FeedbackForm,
    FeedbackQuestion,
    FormAccess,
    OverrideStudent,
    QuestionCategory,
    Semester,
    Student,
    Subject,
    SubjectAllocation,
    FORM_STATUS_ACTIVE,
    LECTURE_TYPE_LAB,
    LECTURE_TYPE_LECTURE,
)
from feedback_app.utils.helpers import new_uuid, utcnow

@pytest.fixture(scope="session")
def app():
    app = create_app()
    app.config.update(
        TESTING=True,
        RATELIMIT_ENABLED=False,
        APP_ENV="testing",
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


@pytest.fixture()
def world(app):
    """
    One department, year 2024-25, semester 3, division A, one subject taught by one
    faculty as a lecture form and a lab form. Ids only; tests open their own context.

    Lecture form questions: rating (lecture), text (lecture), rating tagged batch B1
    under a lab category, and a soft-deleted rating question.
    Lab form question: one rating for batch B1.
    """
    with app.app_context():
        year = AcademicYear(year_string="2024-25")
        dept = Department(name="Computer Engineering", abbreviation="CE")
        db.session.add_all([year, dept])
        db.session.flush()

        sem = Semester(department_id=dept.id, academic_year_id=year.id, semester_number=3, semester_type="ODD")
        db.session.add(sem)
        db.session.flush()

        div = Division(semester_id=sem.id, division_name="A", student_count=60)
        subject = Subject(semester_id=sem.id, name="Data Structures", abbreviation="DS", subject_code="CE301")
        faculty = Faculty(name="Dr. Rao", email="rao@college.test", abbreviation="DR")
        theory = QuestionCategory(category_name="Teaching Quality")
        lab = QuestionCategory(category_name="Laboratory Skills")
        db.session.add_all([div, subject, faculty, theory, lab])
        db.session.flush()

        lecture_alloc = SubjectAllocation(
            faculty_id=faculty.id, subject_id=subject.id, semester_id=sem.id,
            division_id=div.id, lecture_type=LECTURE_TYPE_LECTURE,
        )
        lab_alloc = SubjectAllocation(
            faculty_id=faculty.id, subject_id=subject.id, semester_id=sem.id,
            division_id=div.id, lecture_type=LECTURE_TYPE_LAB, batch="B1",
        )
        db.session.add_all([lecture_alloc, lab_alloc])
        db.session.flush()

        ends = utcnow() + timedelta(days=7)
        form = FeedbackForm(
            subject_allocation_id=lecture_alloc.id, division_id=div.id,
            title="DS Lecture Feedback", status=FORM_STATUS_ACTIVE, end_date=ends,
        )
        lab_form = FeedbackForm(
            subject_allocation_id=lab_alloc.id, division_id=div.id,
            title="DS Lab Feedback", status=FORM_STATUS_ACTIVE, end_date=ends,
        )
        db.session.add_all([form, lab_form])
        db.session.flush()

        def question(form_id, text, category, **kw):
            q = FeedbackQuestion(
                form_id=form_id, category_id=category.id, faculty_id=faculty.id,
                subject_id=subject.id, text=text, **kw,
            )
            db.session.add(q)
            return q

        q_rating = question(form.id, "Explains concepts clearly", theory, type="rating", display_order=1)
        q_text = question(form.id, "Any comments?", theory, type="text", display_order=2)
        q_lab = question(form.id, "Lab guidance", lab, type="rating", batch="B1", display_order=3)
        q_deleted = question(form.id, "Retired question", theory, type="rating", is_deleted=True, display_order=4)
        q_lab_form = question(lab_form.id, "Lab sessions are useful", lab, type="rating", batch="B1", display_order=1)

        override = OverrideStudent(
            name="Guest Student", email="guest@college.test", enrollment_number="OV001",
            department="Mechanical", semester="5", batch="B2",
        )
        db.session.add(override)
        db.session.commit()

        return SimpleNamespace(
            year_id=year.id,
            department_id=dept.id,
            semester_id=sem.id,
            division_id=div.id,
            subject_id=subject.id,
            faculty_id=faculty.id,
            allocation_id=lecture_alloc.id,
            lab_allocation_id=lab_alloc.id,
            form_id=form.id,
            lab_form_id=lab_form.id,
            q_rating=q_rating.id,
            q_text=q_text.id,
            q_lab=q_lab.id,
            q_deleted=q_deleted.id,
            q_lab_form=q_lab_form.id,
            override_id=override.id,
        )


@pytest.fixture()
def grant(world):
    """grant(form_id, student_id=.. | override_student_id=..) -> new access token. Needs an app context."""
    def _grant(form_id=None, student_id=None, override_student_id=None):
        token = f"tok-{new_uuid()}"
        db.session.add(FormAccess(
            form_id=form_id or world.form_id,
            student_id=student_id,
            override_student_id=override_student_id,
            access_token=token,
        ))
        db.session.commit()
        return token
    return _grant


@pytest.fixture()
def enroll(world, grant):
    """enroll(batch="B1") -> (student_id, token for the lecture form). Needs an app context."""
    counter = itertools.count(1)

    def _enroll(batch="B1", **overrides):
        n = next(counter)
        fields = dict(
            name=f"Student {n}",
            email=f"s{n}@college.test",
            enrollment_number=f"EN{n:04d}",
            batch=batch,
            academic_year_id=world.year_id,
            semester_id=world.semester_id,
            division_id=world.division_id,
        )
        fields.update(overrides)
        student = Student(**fields)
        db.session.add(student)
        db.session.commit()
        return student.id, grant(student_id=student.id)
    return _enroll
