from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class QuestionCategory(db.Model):
    __tablename__ = "question_categories"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    category_name = db.Column(db.String(255), nullable=False)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
