from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.models.base import get_db
from app.models.user import User
from app.schemas import exam as exam_schema, retest as retest_schema
from app.services import exam_service, retest_service

router = APIRouter(prefix="/retests", tags=["retests"])


@router.get("", response_model=retest_schema.RetestListResponse)
async def get_my_retests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """본인에게 배정된 대기 중 재시험 목록 API"""
    return await retest_service.get_my_pending_retests(db, user)


@router.get("/{assignment_id}/questions", response_model=exam_schema.ExamStartResponse)
async def get_retest_questions(
    assignment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """재시험 응시 문제 조회 API"""
    return await exam_service.start_retest(db, user, assignment_id)
