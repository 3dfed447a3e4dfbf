from app.models.base import Base, get_db
from app.models.educational_post import EducationalPost
from app.models.exam_result import ExamResult
from app.models.question import Question
from app.models.retest_assignment import RetestAssignment
from app.models.subjective_answer import SubjectiveAnswer
from app.models.user import User
from app.models.wrong_answer_review import WrongAnswerReview

__all__ = [
    "Base",
    "User",
    "EducationalPost",
    "Question",
    "ExamResult",
    "SubjectiveAnswer",
    "RetestAssignment",
    "WrongAnswerReview",
    "get_db",
]
