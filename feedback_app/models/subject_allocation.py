from sqlalchemy import func, text, CheckConstraint
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

# Keep simple text+CHECK for lecture types (no DB enum migration pain)
LECTURE_TYPE_LECTURE = "LECTURE"
LECTURE_TYPE_LAB = "LAB"

class SubjectAllocation(db.Model):
    __tablename__ = "subject_allocations"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    faculty_id = db.Column(db.String(36), db.ForeignKey("faculties.id", ondelete="RESTRICT"), nullable=False, index=True)
    subject_id = db.Column(db.String(36), db.ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False, index=True)
    semester_id = db.Column(db.String(36), db.ForeignKey("semesters.id", ondelete="RESTRICT"), nullable=False, index=True)
    division_id = db.Column(db.String(36), db.ForeignKey("divisions.id", ondelete="RESTRICT"), nullable=False, index=True)

    lecture_type = db.Column(db.String(16), nullable=False, default=LECTURE_TYPE_LECTURE, server_default=text("'LECTURE'"))
    batch = db.Column(db.String(32), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    faculty = db.relationship("Faculty")
    subject = db.relationship("Subject")
    semester = db.relationship("Semester")
    division = db.relationship("Division")

    __table_args__ = (
        CheckConstraint(
            "lecture_type IN ('LECTURE','LAB')",
            name="ck_subject_allocations_lecture_type_valid",
        ),
    )
