from app.crud.educational_post import get_post_by_id
from app.crud.exam_result import (
    create_exam_result,
    get_exam_result_by_id,
    get_exam_results_by_user,
    get_manager_score_summaries,
)
from app.crud.question import (
    create_question,
    delete_question,
    get_question_by_id,
    get_question_counts_by_category,
    get_questions,
    get_questions_by_ids,
    get_random_questions,
    update_question,
)
from app.crud.retest import (
    complete_retest_assignment,
    create_retest_assignment,
    get_retest_assignment_by_id,
    get_retest_assignments,
)
from app.crud.subjective_answer import (
    create_subjective_answer,
    get_review_queue,
    get_status_counts,
    get_subjective_answer_by_id,
    get_subjective_answers_by_result,
    update_subjective_answer,
)
from app.crud.user import get_user_by_id
from app.crud.wrong_answer_review import (
    create_wrong_answer_reviews,
    get_wrong_answer_reviews_by_result,
)

__all__ = [
    "get_post_by_id",
    "create_exam_result",
    "get_exam_result_by_id",
    "get_exam_results_by_user",
    "get_manager_score_summaries",
    "create_question",
    "delete_question",
    "get_question_by_id",
    "get_question_counts_by_category",
    "get_questions",
    "get_questions_by_ids",
    "get_random_questions",
    "update_question",
    "complete_retest_assignment",
    "create_retest_assignment",
    "get_retest_assignment_by_id",
    "get_retest_assignments",
    "create_subjective_answer",
    "get_review_queue",
    "get_status_counts",
    "get_subjective_answer_by_id",
    "get_subjective_answers_by_result",
    "update_subjective_answer",
    "get_user_by_id",
    "create_wrong_answer_reviews",
    "get_wrong_answer_reviews_by_result",
]
