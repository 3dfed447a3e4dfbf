from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.models.subjective_answer import REVIEW_QUEUE_STATUSES, SubjectiveAnswer


async def create_subjective_answer(
    session: AsyncSession,
    question_id: int,
    user_id: int,
    test_result_id: int | None = None,
    answer_text: str | None = None,
    image_url: str | None = None,
    ai_score: float | None = None,
    ai_feedback: str | None = None,
    ai_graded_at: datetime | None = None,
    status: str = "pending",
) -> SubjectiveAnswer:
    """주관식 답변 저장"""
    answer = SubjectiveAnswer(
        question_id=question_id,
        user_id=user_id,
        test_result_id=test_result_id,
        answer_text=answer_text,
        image_url=image_url,
        ai_score=ai_score,
        ai_feedback=ai_feedback,
        ai_graded_at=ai_graded_at,
        status=status,
    )
    session.add(answer)
    await session.commit()
    await session.refresh(answer)
    return answer


async def get_subjective_answer_by_id(
    session: AsyncSession,
    answer_id: int,
) -> SubjectiveAnswer | None:
    """ID로 주관식 답변 조회 (문제 포함)"""
    stmt = (
        select(SubjectiveAnswer)
        .where(SubjectiveAnswer.id == answer_id)
        .options(joinedload(SubjectiveAnswer.question))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_subjective_answers_by_result(
    session: AsyncSession,
    test_result_id: int,
) -> Sequence[SubjectiveAnswer]:
    """테스트 결과에 연결된 주관식 답변 목록 (문제 포함)"""
    stmt = (
        select(SubjectiveAnswer)
        .where(SubjectiveAnswer.test_result_id == test_result_id)
        .options(joinedload(SubjectiveAnswer.question))
        .order_by(SubjectiveAnswer.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_review_queue(session: AsyncSession) -> Sequence[SubjectiveAnswer]:
    """검토 대기열 (pending, ai_graded) 최신순"""
    stmt = (
        select(SubjectiveAnswer)
        .where(SubjectiveAnswer.status.in_(REVIEW_QUEUE_STATUSES))
        .options(
            joinedload(SubjectiveAnswer.question),
            joinedload(SubjectiveAnswer.user),
        )
        .order_by(desc(SubjectiveAnswer.created_at), desc(SubjectiveAnswer.id))
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_status_counts(session: AsyncSession) -> dict[str, int]:
    """상태별 주관식 답변 개수"""
    stmt = select(SubjectiveAnswer.status, func.count(SubjectiveAnswer.id)).group_by(SubjectiveAnswer.status)
    result = await session.execute(stmt)
    return {status: count for status, count in result.all()}


async def update_subjective_answer(
    session: AsyncSession,
    answer: SubjectiveAnswer,
    **fields,
) -> SubjectiveAnswer:
    """주관식 답변 필드 업데이트"""
    for key, value in fields.items():
        setattr(answer, key, value)
    await session.commit()
    await session.refresh(answer)
    return answer
