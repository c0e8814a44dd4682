from models import db
from sqlalchemy.orm import relationship
from scoring.constants import PublishStatus


class Assignment(db.Model):
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=PublishStatus.DRAFT.value)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    professor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    classroom = relationship("Classroom", backref="assignments")
    professor = relationship("User", backref="assignments")
    submissions = relationship("AssignmentSubmission", back_populates="assignment", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status,
            "class_id": self.class_id,
            "professor_id": self.professor_id,
        }
