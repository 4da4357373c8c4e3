from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class Subject(db.Model):
    __tablename__ = "subjects"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    semester_id = db.Column(db.String(36), db.ForeignKey("semesters.id", ondelete="RESTRICT"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    abbreviation = db.Column(db.String(32), nullable=True)
    subject_code = db.Column(db.String(32), nullable=True)
    type = db.Column(db.String(16), nullable=False, default="MANDATORY", server_default=text("'MANDATORY'"))
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    semester = db.relationship("Semester")

    def __repr__(self) -> str:
        return f"<Subject id={self.id} code={self.subject_code!r} name={self.name!r}>"
