from sqlalchemy import func, text, Index
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid, isoformat

class FeedbackSnapshot(db.Model):
    """
    Denormalized copy of one StudentResponse plus every dimension analytics group on.

    Written in the same transaction as the response it mirrors. The *_is_deleted
    columns are the referenced entity's flag at write time; readers filter on
    these instead of re-joining the live hierarchy.
    """
    __tablename__ = "feedback_snapshots"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    original_student_response_id = db.Column(
        db.String(36), db.ForeignKey("student_responses.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )

    # Academic year
    academic_year_id = db.Column(db.String(36), nullable=True, index=True)
    academic_year_string = db.Column(db.String(32), nullable=True)
    academic_year_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Department
    department_id = db.Column(db.String(36), nullable=True, index=True)
    department_name = db.Column(db.String(255), nullable=True)
    department_abbreviation = db.Column(db.String(32), nullable=True)
    department_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Semester
    semester_id = db.Column(db.String(36), nullable=True, index=True)
    semester_number = db.Column(db.Integer, nullable=False, default=0)
    semester_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Division
    division_id = db.Column(db.String(36), nullable=True, index=True)
    division_name = db.Column(db.String(64), nullable=True)
    division_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Subject
    subject_id = db.Column(db.String(36), nullable=True, index=True)
    subject_name = db.Column(db.String(255), nullable=True)
    subject_abbreviation = db.Column(db.String(32), nullable=True)
    subject_code = db.Column(db.String(32), nullable=True)
    subject_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Faculty
    faculty_id = db.Column(db.String(36), nullable=True, index=True)
    faculty_name = db.Column(db.String(255), nullable=True)
    faculty_email = db.Column(db.String(255), nullable=True)
    faculty_abbreviation = db.Column(db.String(32), nullable=True)

    # Respondent
    student_id = db.Column(db.String(36), nullable=True, index=True)
    override_student_id = db.Column(db.String(36), nullable=True, index=True)
    is_override_student = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))
    student_enrollment_number = db.Column(db.String(64), nullable=True)
    student_name = db.Column(db.String(255), nullable=True)
    student_email = db.Column(db.String(255), nullable=True)

    # Form
    form_id = db.Column(db.String(36), nullable=False, index=True)
    form_name = db.Column(db.String(255), nullable=True)
    form_status = db.Column(db.String(16), nullable=True)
    form_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))
    # Maintained by the form soft-delete cascade, separate from the write-time mirror
    form_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Question
    question_id = db.Column(db.String(36), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=True)
    question_type = db.Column(db.String(16), nullable=True)
    question_category_id = db.Column(db.String(36), nullable=True)
    question_category_name = db.Column(db.String(255), nullable=True)
    question_batch = db.Column(db.String(32), nullable=True)
    question_is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    # Answer
    response_value = db.Column(db.Text, nullable=False)
    batch = db.Column(db.String(32), nullable=True)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_feedback_snapshots_year_semester", "academic_year_id", "semester_number"),
        Index("ix_feedback_snapshots_faculty_year", "faculty_id", "academic_year_id"),
    )

    def __repr__(self) -> str:
        return f"<FeedbackSnapshot id={self.id} response_id={self.original_student_response_id}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            original_student_response_id=self.original_student_response_id,
            academic_year_id=self.academic_year_id,
            academic_year_string=self.academic_year_string,
            department_id=self.department_id,
            department_name=self.department_name,
            semester_id=self.semester_id,
            semester_number=self.semester_number,
            division_id=self.division_id,
            division_name=self.division_name,
            subject_id=self.subject_id,
            subject_name=self.subject_name,
            subject_code=self.subject_code,
            faculty_id=self.faculty_id,
            faculty_name=self.faculty_name,
            student_id=self.student_id,
            override_student_id=self.override_student_id,
            is_override_student=self.is_override_student,
            form_id=self.form_id,
            form_name=self.form_name,
            question_id=self.question_id,
            question_text=self.question_text,
            question_type=self.question_type,
            question_category_name=self.question_category_name,
            question_batch=self.question_batch,
            response_value=self.response_value,
            batch=self.batch,
            submitted_at=isoformat(self.submitted_at),
            is_deleted=self.is_deleted,
        )
