from models import db
from sqlalchemy.orm import relationship


class Classroom(db.Model):
    __tablename__ = "classes"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(20), nullable=True, unique=True)
    professor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    professor = relationship("User", backref="taught_classes")
    enrolments = relationship("Enrolment", back_populates="classroom", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Classroom {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "professor_id": self.professor_id,
        }
