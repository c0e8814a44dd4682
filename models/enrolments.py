from models import db


class Enrolment(db.Model):
    __tablename__ = 'enrolments'
    __table_args__ = (db.UniqueConstraint('student_id', 'class_id', name='uq_enrolment_student_class'),)

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    student = db.relationship("User", backref="enrolments")
    classroom = db.relationship("Classroom", back_populates="enrolments")

    def __repr__(self):
        return f"<Enrolment Student {self.student_id} Class {self.class_id}>"
