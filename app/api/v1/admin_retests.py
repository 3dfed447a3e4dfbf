from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.models.base import get_db
from app.models.user import User
from app.schemas import retest as retest_schema
from app.services import retest_service

router = APIRouter(prefix="/admin/retests", tags=["admin-retests"])


@router.get("", response_model=retest_schema.RetestListResponse)
async def get_retests(
    manager_id: int | None = Query(None, description="매니저 ID 필터"),
    status_filter: Literal["pending", "completed"] | None = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """재시험 배정 목록 API"""
    return await retest_service.list_retests(db, manager_id=manager_id, status=status_filter)


@router.post("", response_model=retest_schema.RetestResponse, status_code=status.HTTP_201_CREATED)
async def create_retest(
    request: retest_schema.RetestCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """재시험 배정 API"""
    return await retest_service.create_retest(db, admin, request)
