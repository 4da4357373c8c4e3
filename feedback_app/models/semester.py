from sqlalchemy import func, text, Index
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class Semester(db.Model):
    __tablename__ = "semesters"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    department_id = db.Column(db.String(36), db.ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False, index=True)
    academic_year_id = db.Column(db.String(36), db.ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False, index=True)

    semester_number = db.Column(db.Integer, nullable=False)
    semester_type = db.Column(db.String(16), nullable=False, default="ODD", server_default=text("'ODD'"))
    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    department = db.relationship("Department")
    academic_year = db.relationship("AcademicYear")

    __table_args__ = (
        Index("ix_semesters_year_dept_number", "academic_year_id", "department_id", "semester_number"),
    )

    def __repr__(self) -> str:
        return f"<Semester id={self.id} number={self.semester_number}>"
