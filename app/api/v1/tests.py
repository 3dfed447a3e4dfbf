from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.models.base import get_db
from app.models.user import User
from app.schemas import exam as exam_schema
from app.services import exam_service

router = APIRouter(prefix="/tests", tags=["tests"])


@router.get("", response_model=exam_schema.ExamListResponse)
async def get_tests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """테스트 목록 조회 API (카테고리 + 최근 결과)"""
    return await exam_service.get_exam_list(db, user)


@router.get("/{category}/questions", response_model=exam_schema.ExamStartResponse)
async def get_test_questions(
    category: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """응시 문제 조회 API ('전체'는 전 카테고리 랜덤 출제)"""
    return await exam_service.start_exam(db, category)


@router.post("/grade", response_model=exam_schema.GradingResultSchema)
async def grade_answer(
    request: exam_schema.GradeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """주관식 답안 잠정 AI 채점 API (저장하지 않음)"""
    return await exam_service.grade_answer(db, request)


@router.post("/submit", response_model=exam_schema.ExamSubmitResponse)
async def submit_test(
    request: exam_schema.ExamSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """테스트 제출 API"""
    return await exam_service.submit_exam(db, user, request)
