from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class FeedbackAnalytics(db.Model):
    """Pre-aggregated per-form figures written by an external scheduled job; read-only here."""
    __tablename__ = "feedback_analytics"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    form_id = db.Column(db.String(36), db.ForeignKey("feedback_forms.id", ondelete="CASCADE"), nullable=True, index=True)
    average_rating = db.Column(db.Float, nullable=False, default=0.0)
    completion_rate = db.Column(db.Float, nullable=False, default=0.0)
    calculated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))
