"""주관식 답변 검토 워크플로

상태는 pending -> ai_graded -> admin_reviewed 순서로만 전이한다.
동시 검토는 잠금 없이 마지막 쓰기가 남지만, 각 요청이 읽은 상태 기준의 전이 검사는 항상 적용된다.
"""
import json
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import subjective_answer as subjective_answer_crud
from app.exceptions import InvalidReviewStateError, InvalidScoreError, SubjectiveAnswerNotFoundError
from app.models.subjective_answer import (
    STATUS_ADMIN_REVIEWED,
    STATUS_AI_GRADED,
    STATUS_PENDING,
    SubjectiveAnswer,
)
from app.models.user import User
from app.schemas import review as review_schema
from app.services.exam_service import grade_with_ai

logger = logging.getLogger(__name__)

APPROVE_FEEDBACK = "AI 채점 승인"


async def _get_answer(session: AsyncSession, answer_id: int) -> SubjectiveAnswer:
    answer = await subjective_answer_crud.get_subjective_answer_by_id(session, answer_id)
    if not answer:
        raise SubjectiveAnswerNotFoundError(answer_id)
    return answer


def _require_not_reviewed(answer: SubjectiveAnswer) -> None:
    if answer.status == STATUS_ADMIN_REVIEWED:
        raise InvalidReviewStateError(f"이미 관리자 검토가 완료된 답변입니다: {answer.id}")


def _to_response(answer: SubjectiveAnswer) -> review_schema.SubjectiveAnswerResponse:
    return review_schema.SubjectiveAnswerResponse.model_validate(answer)


async def get_review_queue(session: AsyncSession) -> review_schema.ReviewQueueResponse:
    """검토 대기열과 상태별 개수"""
    answers = await subjective_answer_crud.get_review_queue(session)
    counts = await subjective_answer_crud.get_status_counts(session)

    items = []
    for answer in answers:
        question = answer.question
        items.append(
            review_schema.ReviewQueueItem(
                **_to_response(answer).model_dump(),
                question=question.question,
                max_score=question.max_score,
                grading_criteria=question.grading_criteria,
                model_answer=question.model_answer,
                category=question.category,
                username=answer.user.username if answer.user else None,
            )
        )

    total_pending = counts.get(STATUS_PENDING, 0)
    total_ai_graded = counts.get(STATUS_AI_GRADED, 0)
    return review_schema.ReviewQueueResponse(
        answers=items,
        total_pending=total_pending,
        total_ai_graded=total_ai_graded,
        total=total_pending + total_ai_graded,
    )


async def ai_grade(
    session: AsyncSession,
    answer_id: int,
) -> review_schema.SubjectiveAnswerResponse:
    """대기 중인 답변을 AI로 채점 (pending -> ai_graded)"""
    answer = await _get_answer(session, answer_id)
    if answer.status != STATUS_PENDING:
        raise InvalidReviewStateError(f"채점 대기 상태의 답변만 AI 채점할 수 있습니다: status={answer.status}")

    grading = await grade_with_ai(answer.question, answer.answer_text or "", answer.image_url)

    answer = await subjective_answer_crud.update_subjective_answer(
        session,
        answer,
        ai_score=grading.score,
        ai_feedback=json.dumps(
            {
                "feedback": grading.feedback,
                "strengths": grading.strengths,
                "improvements": grading.improvements,
            },
            ensure_ascii=False,
        ),
        ai_graded_at=datetime.now(timezone.utc),
        status=STATUS_AI_GRADED,
    )
    logger.info(f"주관식 AI 채점 완료: answer_id={answer_id}, ai_score={grading.score}")
    return _to_response(answer)


async def approve(
    session: AsyncSession,
    answer_id: int,
    admin: User,
) -> review_schema.SubjectiveAnswerResponse:
    """AI 점수를 최종 점수로 승인"""
    answer = await _get_answer(session, answer_id)
    _require_not_reviewed(answer)
    if answer.ai_score is None or answer.status != STATUS_AI_GRADED:
        raise InvalidReviewStateError("AI 채점 결과가 없는 답변은 승인할 수 없습니다.")

    answer = await subjective_answer_crud.update_subjective_answer(
        session,
        answer,
        admin_score=answer.ai_score,
        admin_feedback=APPROVE_FEEDBACK,
        admin_reviewer_id=admin.id,
        admin_reviewed_at=datetime.now(timezone.utc),
        final_score=answer.ai_score,
        status=STATUS_ADMIN_REVIEWED,
    )
    logger.info(f"주관식 AI 채점 승인: answer_id={answer_id}, admin_id={admin.id}")
    return _to_response(answer)


async def override(
    session: AsyncSession,
    answer_id: int,
    admin: User,
    request: review_schema.ReviewOverrideRequest,
) -> review_schema.SubjectiveAnswerResponse:
    """관리자 점수로 최종 점수 지정 (0~배점 범위 밖이면 저장 전에 거부)"""
    answer = await _get_answer(session, answer_id)
    max_score = answer.question.max_score
    if not 0 <= request.score <= max_score:
        raise InvalidScoreError(max_score)
    _require_not_reviewed(answer)

    answer = await subjective_answer_crud.update_subjective_answer(
        session,
        answer,
        admin_score=request.score,
        admin_feedback=request.feedback,
        admin_reviewer_id=admin.id,
        admin_reviewed_at=datetime.now(timezone.utc),
        final_score=request.score,
        status=STATUS_ADMIN_REVIEWED,
    )
    logger.info(
        f"주관식 점수 수정: answer_id={answer_id}, admin_id={admin.id}, "
        f"score={request.score}/{max_score}"
    )
    return _to_response(answer)
