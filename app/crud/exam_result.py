from typing import Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.exam_result import ExamResult
from app.models.user import ROLE_MANAGER, User


async def create_exam_result(
    session: AsyncSession,
    user_id: int,
    category: str,
    score: int,
    correct_count: int,
    total_count: int,
    category_scores: dict | None = None,
) -> ExamResult:
    """테스트 결과 저장"""
    result = ExamResult(
        user_id=user_id,
        category=category,
        score=score,
        correct_count=correct_count,
        total_count=total_count,
        category_scores=category_scores or {},
    )
    session.add(result)
    await session.commit()
    await session.refresh(result)
    return result


async def get_exam_result_by_id(
    session: AsyncSession,
    result_id: int,
    user_id: int | None = None,
) -> ExamResult | None:
    """ID로 테스트 결과 조회 (user_id가 주어지면 본인 결과만)"""
    stmt = select(ExamResult).where(ExamResult.id == result_id)
    if user_id is not None:
        stmt = stmt.where(ExamResult.user_id == user_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_exam_results_by_user(
    session: AsyncSession,
    user_id: int,
    limit: int | None = None,
) -> Sequence[ExamResult]:
    """사용자의 테스트 결과 목록 (최신순)"""
    stmt = (
        select(ExamResult)
        .where(ExamResult.user_id == user_id)
        .order_by(desc(ExamResult.test_date), desc(ExamResult.id))
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_manager_score_summaries(
    session: AsyncSession,
) -> list[tuple[User, float | None, int]]:
    """매니저별 평균 점수와 응시 횟수"""
    stmt = (
        select(
            User,
            func.avg(ExamResult.score),
            func.count(ExamResult.id),
        )
        .outerjoin(ExamResult, ExamResult.user_id == User.id)
        .where(User.role == ROLE_MANAGER)
        .group_by(User.id)
        .order_by(User.id)
    )
    result = await session.execute(stmt)
    return [(user, avg, count) for user, avg, count in result.all()]
