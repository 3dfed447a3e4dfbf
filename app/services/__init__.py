from app.services.ai_service import generate_question_draft, grade_subjective_answer
from app.services.attempt_session import AttemptOutcome, AttemptSession
from app.services.grading import (
    GradeOutcome,
    ScoreSummary,
    calculate_percentage,
    grade,
    round_half_up,
    score_attempt,
)

__all__ = [
    "generate_question_draft",
    "grade_subjective_answer",
    "AttemptOutcome",
    "AttemptSession",
    "GradeOutcome",
    "ScoreSummary",
    "calculate_percentage",
    "grade",
    "round_half_up",
    "score_attempt",
]
