from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.models.base import get_db
from app.models.user import User
from app.schemas import user as user_schema
from app.services import exam_service

router = APIRouter(prefix="/admin/managers", tags=["admin-managers"])


@router.get("/scores", response_model=user_schema.ManagerScoreListResponse)
async def get_manager_scores(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """매니저별 평균 점수 API"""
    return await exam_service.get_manager_scores(db)
