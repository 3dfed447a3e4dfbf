from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.retest_assignment import RETEST_COMPLETED, RETEST_PENDING, RetestAssignment


async def create_retest_assignment(
    session: AsyncSession,
    admin_id: int,
    manager_id: int,
    category: str | None = None,
    question_ids: list[int] | None = None,
    reason: str | None = None,
) -> RetestAssignment:
    """재시험 배정 생성"""
    assignment = RetestAssignment(
        admin_id=admin_id,
        manager_id=manager_id,
        category=category,
        question_ids=question_ids,
        reason=reason,
        status=RETEST_PENDING,
    )
    session.add(assignment)
    await session.commit()
    await session.refresh(assignment)
    return assignment


async def get_retest_assignment_by_id(
    session: AsyncSession,
    assignment_id: int,
) -> RetestAssignment | None:
    """ID로 재시험 배정 조회"""
    result = await session.execute(select(RetestAssignment).where(RetestAssignment.id == assignment_id))
    return result.scalar_one_or_none()


async def get_retest_assignments(
    session: AsyncSession,
    manager_id: int | None = None,
    status: str | None = None,
) -> Sequence[RetestAssignment]:
    """재시험 배정 목록 (최신순)"""
    stmt = select(RetestAssignment)
    if manager_id is not None:
        stmt = stmt.where(RetestAssignment.manager_id == manager_id)
    if status is not None:
        stmt = stmt.where(RetestAssignment.status == status)
    stmt = stmt.order_by(desc(RetestAssignment.created_at), desc(RetestAssignment.id))
    result = await session.execute(stmt)
    return result.scalars().all()


async def complete_retest_assignment(
    session: AsyncSession,
    assignment_id: int,
) -> bool:
    """재시험 완료 처리 (pending일 때만 갱신, 두 번째 호출은 아무것도 바꾸지 않음)

    Returns:
        이번 호출로 상태가 바뀌었으면 True
    """
    stmt = (
        update(RetestAssignment)
        .where(
            RetestAssignment.id == assignment_id,
            RetestAssignment.status == RETEST_PENDING,
        )
        .values(status=RETEST_COMPLETED, completed_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount > 0
