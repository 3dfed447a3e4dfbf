from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.models.question import Question


async def get_question_by_id(
    session: AsyncSession,
    question_id: int,
    load_related_post: bool = False,
) -> Question | None:
    """ID로 문제 조회

    Args:
        session: 데이터베이스 세션
        question_id: 문제 ID
        load_related_post: 관련 교육 게시물을 eager load할지 여부
    """
    stmt = select(Question).where(Question.id == question_id)
    if load_related_post:
        stmt = stmt.options(joinedload(Question.related_post)).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_questions_by_ids(
    session: AsyncSession,
    question_ids: list[int],
    load_related_post: bool = False,
) -> list[Question]:
    """ID 목록으로 문제 조회 (요청한 ID 순서 유지, 없는 ID는 제외)"""
    if not question_ids:
        return []
    stmt = select(Question).where(Question.id.in_(question_ids))
    if load_related_post:
        stmt = stmt.options(joinedload(Question.related_post)).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    by_id = {q.id: q for q in result.scalars().all()}
    return [by_id[qid] for qid in dict.fromkeys(question_ids) if qid in by_id]


async def get_questions(
    session: AsyncSession,
    category: str | None = None,
    load_related_post: bool = False,
) -> Sequence[Question]:
    """문제 목록 조회 (카테고리 필터 선택)"""
    stmt = select(Question)
    if category is not None:
        stmt = stmt.where(Question.category == category)
    if load_related_post:
        stmt = stmt.options(joinedload(Question.related_post)).execution_options(populate_existing=True)
    stmt = stmt.order_by(Question.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_random_questions(
    session: AsyncSession,
    count: int,
) -> Sequence[Question]:
    """전체 카테고리에서 랜덤 문제 추출 (DB 레벨 샘플링)"""
    stmt = select(Question).order_by(func.random()).limit(count)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_question_counts_by_category(session: AsyncSession) -> dict[str, int]:
    """카테고리별 문제 개수"""
    stmt = (
        select(Question.category, func.count(Question.id))
        .group_by(Question.category)
        .order_by(Question.category)
    )
    result = await session.execute(stmt)
    return {category: count for category, count in result.all()}


async def create_question(session: AsyncSession, **fields: Any) -> Question:
    """문제 생성"""
    question = Question(**fields)
    session.add(question)
    await session.commit()
    await session.refresh(question)
    return question


async def update_question(
    session: AsyncSession,
    question: Question,
    fields: dict[str, Any],
) -> Question:
    """문제 수정 (전달된 필드만 반영)"""
    for key, value in fields.items():
        setattr(question, key, value)
    await session.commit()
    await session.refresh(question)
    return question


async def delete_question(session: AsyncSession, question: Question) -> None:
    """문제 삭제"""
    await session.delete(question)
    await session.commit()
