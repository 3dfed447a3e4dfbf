"""오답 복습

원래 테스트 결과는 읽기만 하고, 복습 답안은 별도 기록으로만 남긴다.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import (
    exam_result as exam_result_crud,
    question as question_crud,
    wrong_answer_review as wrong_answer_review_crud,
)
from app.exceptions import ResultNotFoundError
from app.models.question import Question
from app.models.user import User
from app.schemas import question as question_schema, review as review_schema
from app.services.exam_service import category_title
from app.services.grading import calculate_percentage, is_objective_correct

logger = logging.getLogger(__name__)


async def _load_review_questions(
    session: AsyncSession,
    category: str,
    question_ids: list[int] | None,
) -> list[Question]:
    """복습 대상 객관식 문제 (문제 ID 지정 > '전체' > 결과 카테고리)"""
    if question_ids:
        questions = await question_crud.get_questions_by_ids(session, question_ids, load_related_post=True)
    elif category == settings.full_test_category:
        questions = await question_crud.get_questions(session, load_related_post=True)
    else:
        questions = await question_crud.get_questions(session, category=category, load_related_post=True)
    return [q for q in questions if not q.is_subjective]


async def get_review_questions(
    session: AsyncSession,
    user: User,
    test_result_id: int,
    question_ids: list[int] | None = None,
) -> review_schema.ReviewQuestionListResponse:
    """오답 복습용 문제 목록 (정답 포함)"""
    result = await exam_result_crud.get_exam_result_by_id(session, test_result_id, user_id=user.id)
    if not result:
        raise ResultNotFoundError(test_result_id)

    questions = await _load_review_questions(session, result.category, question_ids)
    responses = [
        question_schema.ReviewQuestionResponse(
            id=q.id,
            category=q.category,
            question=q.question,
            question_type=q.question_type,
            question_image_urls=q.question_image_urls or [],
            options=q.options or [],
            correct_answer=sorted(q.correct_answer_set),
            max_score=q.max_score,
            related_post_id=q.related_post_id,
            related_post_title=q.related_post.title if q.related_post else None,
        )
        for q in questions
    ]
    return review_schema.ReviewQuestionListResponse(
        test_result_id=result.id,
        category_title=category_title(result.category),
        questions=responses,
        total=len(responses),
    )


async def submit_review(
    session: AsyncSession,
    user: User,
    request: review_schema.WrongAnswerReviewRequest,
) -> review_schema.WrongAnswerReviewResponse:
    """복습 답안 채점 및 기록 (기록 저장 실패는 로그만 남기고 결과는 반환)"""
    user_id = user.id
    result = await exam_result_crud.get_exam_result_by_id(session, request.test_result_id, user_id=user_id)
    if not result:
        raise ResultNotFoundError(request.test_result_id)

    questions = await question_crud.get_questions_by_ids(
        session, [a.question_id for a in request.answers]
    )
    # 결과 카테고리 밖의 문제는 복습 대상이 아님 ('전체' 테스트는 모든 카테고리 허용)
    any_category = result.category == settings.full_test_category
    by_id = {
        q.id: q
        for q in questions
        if not q.is_subjective and (any_category or q.category == result.category)
    }

    items = []
    for submitted in request.answers:
        question = by_id.get(submitted.question_id)
        if question is None:
            continue
        correct_answer = sorted(question.correct_answer_set)
        items.append(
            review_schema.WrongAnswerReviewItem(
                question_id=question.id,
                selected=submitted.selected,
                correct_answer=correct_answer,
                is_correct=is_objective_correct(correct_answer, submitted.selected),
            )
        )

    correct_count = sum(1 for item in items if item.is_correct)
    if items:
        try:
            await wrong_answer_review_crud.create_wrong_answer_reviews(
                session,
                user_id=user_id,
                test_result_id=request.test_result_id,
                items=[(item.question_id, item.selected, item.is_correct) for item in items],
            )
        except Exception as e:
            logger.error(
                f"오답 복습 기록 저장 실패: test_result_id={request.test_result_id}, "
                f"user_id={user_id}, error_type={type(e).__name__}",
                exc_info=True,
            )
            await session.rollback()

    return review_schema.WrongAnswerReviewResponse(
        test_result_id=request.test_result_id,
        score=calculate_percentage(correct_count, len(items)),
        correct_count=correct_count,
        total_count=len(items),
        items=items,
    )
