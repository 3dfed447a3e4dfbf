from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.exceptions import ResultNotFoundError
from app.models.base import get_db
from app.models.user import User
from app.schemas import exam as exam_schema, review as review_schema
from app.services import exam_service

router = APIRouter(prefix="/results", tags=["results"])

TEST_LIST_PATH = "/api/v1/tests"


@router.get("", response_model=exam_schema.ExamResultListResponse)
async def get_results(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """본인 테스트 결과 이력 API"""
    return await exam_service.get_my_results(db, user)


@router.get(
    "/{result_id}",
    response_model=review_schema.ExamResultDetailResponse,
    responses={303: {"description": "결과가 없으면 테스트 목록으로 이동"}},
)
async def get_result(
    result_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """테스트 결과 상세 API"""
    try:
        return await exam_service.get_result_detail(db, user, result_id)
    except ResultNotFoundError:
        return RedirectResponse(TEST_LIST_PATH, status_code=status.HTTP_303_SEE_OTHER)
