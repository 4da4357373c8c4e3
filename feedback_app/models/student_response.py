from sqlalchemy import func, text, Index, UniqueConstraint
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid, isoformat

class StudentResponse(db.Model):
    __tablename__ = "student_responses"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    student_id = db.Column(db.String(36), db.ForeignKey("students.id", ondelete="RESTRICT"), nullable=True, index=True)
    override_student_id = db.Column(db.String(36), db.ForeignKey("override_students.id", ondelete="RESTRICT"), nullable=True, index=True)
    feedback_form_id = db.Column(db.String(36), db.ForeignKey("feedback_forms.id", ondelete="RESTRICT"), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey("feedback_questions.id", ondelete="RESTRICT"), nullable=False, index=True)

    # JSON-serialized regardless of the answer's native type
    response_value = db.Column(db.Text, nullable=False)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    student = db.relationship("Student")
    question = db.relationship("FeedbackQuestion")
    feedback_form = db.relationship("FeedbackForm")

    __table_args__ = (
        # One answer per (respondent, question)
        UniqueConstraint("student_id", "question_id", name="uq_student_responses_student_question"),
        UniqueConstraint("override_student_id", "question_id", name="uq_student_responses_override_question"),
        Index("ix_student_responses_form_deleted", "feedback_form_id", "is_deleted"),
    )

    def __repr__(self) -> str:
        return f"<StudentResponse id={self.id} question_id={self.question_id}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            student_id=self.student_id,
            override_student_id=self.override_student_id,
            feedback_form_id=self.feedback_form_id,
            question_id=self.question_id,
            response_value=self.response_value,
            submitted_at=isoformat(self.submitted_at),
            is_deleted=self.is_deleted,
        )
