from models import db
from sqlalchemy.orm import relationship


class AssignmentSubmission(db.Model):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        db.UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assignments.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    file_url = db.Column(db.String(255), nullable=False)
    original_file_name = db.Column(db.String(255), nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=False, default=db.func.now())

    grade = db.Column(db.Float, nullable=True)
    grader_feedback = db.Column(db.Text, nullable=True)
    graded_at = db.Column(db.DateTime, nullable=True)
    graded_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Relationships
    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id], backref="assignment_submissions")

    @property
    def is_graded(self):
        return self.grade is not None

    def to_dict(self):
        return {
            "id": self.id,
            "assignment_id": self.assignment_id,
            "student_id": self.student_id,
            "file_name": self.original_file_name,
            "file_url": self.file_url,
            "feedback": self.feedback,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "grade": self.grade,
            "grader_feedback": self.grader_feedback,
            "graded_at": self.graded_at.isoformat() if self.graded_at else None,
            "graded_by": self.graded_by,
        }
