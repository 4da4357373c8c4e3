from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class Student(db.Model):
    __tablename__ = "students"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    enrollment_number = db.Column(db.String(64), nullable=False, index=True)
    batch = db.Column(db.String(32), nullable=True)

    # Academic placement
    academic_year_id = db.Column(db.String(36), db.ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=True, index=True)
    semester_id = db.Column(db.String(36), db.ForeignKey("semesters.id", ondelete="RESTRICT"), nullable=True, index=True)
    division_id = db.Column(db.String(36), db.ForeignKey("divisions.id", ondelete="RESTRICT"), nullable=True, index=True)

    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    academic_year = db.relationship("AcademicYear")
    semester = db.relationship("Semester")
    division = db.relationship("Division")

    def __repr__(self) -> str:
        return f"<Student id={self.id} enrollment={self.enrollment_number!r}>"
