from sqlalchemy import func, text, CheckConstraint
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

FORM_STATUS_DRAFT = "DRAFT"
FORM_STATUS_ACTIVE = "ACTIVE"
FORM_STATUS_CLOSED = "CLOSED"

class FeedbackForm(db.Model):
    __tablename__ = "feedback_forms"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    subject_allocation_id = db.Column(db.String(36), db.ForeignKey("subject_allocations.id", ondelete="RESTRICT"), nullable=False, index=True)
    division_id = db.Column(db.String(36), db.ForeignKey("divisions.id", ondelete="RESTRICT"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=FORM_STATUS_DRAFT, server_default=text("'DRAFT'"))
    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    subject_allocation = db.relationship("SubjectAllocation")
    division = db.relationship("Division")

    __table_args__ = (
        CheckConstraint(
            "status IN ('DRAFT','ACTIVE','CLOSED')",
            name="ck_feedback_forms_status_valid",
        ),
    )

    def __repr__(self) -> str:
        return f"<FeedbackForm id={self.id} status={self.status!r}>"
