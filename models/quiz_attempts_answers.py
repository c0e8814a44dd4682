from models import db


class QuizAttemptAnswer(db.Model):
    __tablename__ = "quiz_attempt_answers"

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("quiz_attempts.id"), nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id"), nullable=False)
    selected_options = db.Column(db.JSON, nullable=True)
    text_answer = db.Column(db.Text, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    points = db.Column(db.Float, nullable=False, default=0)

    # Manual grading overlay; the auto-scored columns above are never rewritten
    override_points = db.Column(db.Float, nullable=True)
    overridden_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    overridden_at = db.Column(db.DateTime, nullable=True)

    attempt = db.relationship("QuizAttempt", back_populates="answers")
    question = db.relationship("QuizQuestion")

    @property
    def effective_points(self):
        return self.override_points if self.override_points is not None else (self.points or 0)

    def to_dict(self):
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "selected_options": self.selected_options,
            "text_answer": self.text_answer,
            "is_correct": self.is_correct,
            "points": self.points,
            "override_points": self.override_points,
            "overridden_at": self.overridden_at.isoformat() if self.overridden_at else None,
        }
