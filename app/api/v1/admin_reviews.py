from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.models.base import get_db
from app.models.user import User
from app.schemas import review as review_schema
from app.services import review_service

router = APIRouter(prefix="/admin/reviews", tags=["admin-reviews"])


@router.get("", response_model=review_schema.ReviewQueueResponse)
async def get_review_queue(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """주관식 검토 대기열 API"""
    return await review_service.get_review_queue(db)


@router.post("/{answer_id}/ai-grade", response_model=review_schema.SubjectiveAnswerResponse)
async def ai_grade_answer(
    answer_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """대기 중 답변 AI 채점 API"""
    return await review_service.ai_grade(db, answer_id)


@router.post("/{answer_id}/approve", response_model=review_schema.SubjectiveAnswerResponse)
async def approve_answer(
    answer_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """AI 채점 승인 API"""
    return await review_service.approve(db, answer_id, admin)


@router.post("/{answer_id}/override", response_model=review_schema.SubjectiveAnswerResponse)
async def override_answer(
    answer_id: int,
    request: review_schema.ReviewOverrideRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """관리자 점수 수정 API"""
    return await review_service.override(db, answer_id, admin, request)
