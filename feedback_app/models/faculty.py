from sqlalchemy import func, text
from feedback_app.extensions import db
from feedback_app.utils.helpers import new_uuid

class Faculty(db.Model):
    __tablename__ = "faculties"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    abbreviation = db.Column(db.String(32), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Faculty id={self.id} name={self.name!r}>"
