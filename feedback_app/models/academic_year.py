from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class AcademicYear(db.Model):
    __tablename__ = "academic_years"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    year_string = db.Column(db.String(32), nullable=False, index=True)  # e.g. "2024-25"
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<AcademicYear id={self.id} year={self.year_string!r}>"
