from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class RetestCreateRequest(BaseModel):
    """재시험 배정 요청 스키마"""
    manager_id: int
    category: str | None = Field(None, description="카테고리 범위 (없으면 question_ids 또는 전체)")
    question_ids: list[int] | None = Field(None, description="재시험 문제 ID 목록")
    reason: str | None = None


class RetestResponse(BaseModel):
    """재시험 배정 응답 스키마"""
    id: int
    admin_id: int
    manager_id: int
    category: str | None
    question_ids: list[int] | None
    reason: str | None
    status: Literal["pending", "completed"]
    created_at: datetime
    completed_at: datetime | None

    model_config = {"from_attributes": True}


class RetestListResponse(BaseModel):
    assignments: list[RetestResponse]
    total: int
