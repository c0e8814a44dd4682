from models import db


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        db.UniqueConstraint("quiz_id", "student_id", "attempt_number", name="uq_attempt_ordinal"),
    )

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    attempt_number = db.Column(db.Integer, nullable=False, default=1)
    score = db.Column(db.Float, nullable=False, default=0)
    time_spent = db.Column(db.Integer, nullable=True)  # seconds
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    quiz = db.relationship("Quiz", back_populates="attempts")
    student = db.relationship("User", backref=db.backref("quiz_attempts", lazy=True))
    answers = db.relationship("QuizAttemptAnswer", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    @property
    def is_completed(self):
        return self.completed_at is not None
