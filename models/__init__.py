from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.users import User
from models.classrooms import Classroom
from models.enrolments import Enrolment

from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.question_options import QuestionOption
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer

from models.assignment import Assignment
from models.assignment_submission import AssignmentSubmission

from models.attendance import AttendanceSession, AttendanceRecord
from models.notifications import Notification
