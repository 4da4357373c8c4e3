from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class OverrideStudent(db.Model):
    """
    Manually-added respondent with no Student row. Placement is free text only;
    the academic chain is resolved through the form's allocation instead.
    """
    __tablename__ = "override_students"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    enrollment_number = db.Column(db.String(64), nullable=True)
    department = db.Column(db.String(255), nullable=True)
    semester = db.Column(db.String(16), nullable=True)
    batch = db.Column(db.String(32), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<OverrideStudent id={self.id} email={self.email!r}>"
