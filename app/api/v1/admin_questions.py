from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.models.base import get_db
from app.models.user import User
from app.schemas import ai, question as question_schema
from app.services import question_service

router = APIRouter(prefix="/admin/questions", tags=["admin-questions"])


@router.get("", response_model=question_schema.QuestionListResponse)
async def get_questions(
    category: str | None = Query(None, description="카테고리 필터"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """문제 목록 조회 API"""
    return await question_service.list_questions(db, category)


@router.post("", response_model=question_schema.QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    request: question_schema.QuestionCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """문제 생성 API"""
    return await question_service.create_question(db, request)


@router.post("/generate", response_model=ai.AIQuestionDraftResponse)
async def generate_question(
    request: question_schema.QuestionDraftRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """AI 문제 초안 생성 API (저장하지 않음)"""
    return await question_service.generate_question_draft(db, request)


@router.get("/{question_id}", response_model=question_schema.QuestionResponse)
async def get_question(
    question_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """문제 상세 조회 API"""
    return await question_service.get_question(db, question_id)


@router.put("/{question_id}", response_model=question_schema.QuestionResponse)
async def update_question(
    question_id: int,
    request: question_schema.QuestionUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """문제 수정 API"""
    return await question_service.update_question(db, question_id, request)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """문제 삭제 API"""
    await question_service.delete_question(db, question_id)
