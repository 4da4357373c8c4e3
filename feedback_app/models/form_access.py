from sqlalchemy import func, text, CheckConstraint
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class FormAccess(db.Model):
    """One-time capability: a single respondent may answer a single form once."""
    __tablename__ = "form_access"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    form_id = db.Column(db.String(36), db.ForeignKey("feedback_forms.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = db.Column(db.String(36), db.ForeignKey("students.id", ondelete="CASCADE"), nullable=True, index=True)
    override_student_id = db.Column(db.String(36), db.ForeignKey("override_students.id", ondelete="CASCADE"), nullable=True, index=True)

    access_token = db.Column(db.String(255), nullable=False, unique=True, index=True)
    # Flips false -> true exactly once (conditional UPDATE in the submission service)
    is_submitted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    form = db.relationship("FeedbackForm")
    student = db.relationship("Student")
    override_student = db.relationship("OverrideStudent")

    __table_args__ = (
        CheckConstraint(
            "(student_id IS NULL) <> (override_student_id IS NULL)",
            name="ck_form_access_one_respondent",
        ),
    )

    def __repr__(self) -> str:
        return f"<FormAccess id={self.id} form_id={self.form_id} submitted={self.is_submitted}>"
