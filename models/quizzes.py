from models import db
from sqlalchemy.orm import relationship
from scoring.constants import PublishStatus


class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    professor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    max_attempts = db.Column(db.Integer, nullable=False, default=1)
    time_limit = db.Column(db.Integer, nullable=True)  # minutes
    status = db.Column(db.String(20), nullable=False, default=PublishStatus.DRAFT.value)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    classroom = relationship("Classroom", backref="quizzes")
    professor = relationship("User", backref="quizzes")
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        order_by="QuizQuestion.order",
        cascade="all, delete-orphan",
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def total_points(self):
        """Points available across every question, answered or not."""
        return sum(question.points or 0 for question in self.questions)

    def __repr__(self):
        return f"<Quiz {self.title}>"
