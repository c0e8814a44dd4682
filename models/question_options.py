from models import db


class QuestionOption(db.Model):
    __tablename__ = "question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id"), nullable=False)
    text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    order = db.Column(db.Integer, nullable=False, default=0)

    question = db.relationship("QuizQuestion", back_populates="options")

    def to_dict(self, include_answers=False):
        data = {
            "id": self.id,
            "text": self.text,
            "order": self.order,
        }
        if include_answers:
            data["is_correct"] = self.is_correct
        return data
