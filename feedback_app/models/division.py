from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class Division(db.Model):
    __tablename__ = "divisions"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    semester_id = db.Column(db.String(36), db.ForeignKey("semesters.id", ondelete="RESTRICT"), nullable=False, index=True)
    division_name = db.Column(db.String(64), nullable=False)
    student_count = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    semester = db.relationship("Semester")

    def __repr__(self) -> str:
        return f"<Division id={self.id} name={self.division_name!r}>"
