# `text` is also a column name below
from sqlalchemy import func, text as sa_text, Index
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

# "None" (the string) marks a lecture-context question; anything else is a lab batch
LECTURE_BATCH_MARKER = "None"

QUESTION_TYPE_RATING = "rating"
QUESTION_TYPE_TEXT = "text"

class FeedbackQuestion(db.Model):
    __tablename__ = "feedback_questions"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    form_id = db.Column(db.String(36), db.ForeignKey("feedback_forms.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey("question_categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    faculty_id = db.Column(db.String(36), db.ForeignKey("faculties.id", ondelete="RESTRICT"), nullable=False, index=True)
    subject_id = db.Column(db.String(36), db.ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False, index=True)

    text = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(16), nullable=False, default=QUESTION_TYPE_RATING, server_default=sa_text("'rating'"))
    batch = db.Column(db.String(32), nullable=False, default=LECTURE_BATCH_MARKER, server_default=sa_text("'None'"))
    is_required = db.Column(db.Boolean, nullable=False, default=True, server_default=sa_text("true"))
    display_order = db.Column(db.Integer, nullable=False, default=0, server_default=sa_text("0"))
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=sa_text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    form = db.relationship("FeedbackForm")
    category = db.relationship("QuestionCategory")
    faculty = db.relationship("Faculty")
    subject = db.relationship("Subject")

    __table_args__ = (
        Index("ix_feedback_questions_form_deleted", "form_id", "is_deleted"),
    )

    def __repr__(self) -> str:
        return f"<FeedbackQuestion id={self.id} type={self.type!r} batch={self.batch!r}>"
