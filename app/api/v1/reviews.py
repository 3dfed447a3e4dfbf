from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.exceptions import InvalidRequestError, ResultNotFoundError
from app.models.base import get_db
from app.models.user import User
from app.schemas import review as review_schema
from app.services import wrong_answer_service

router = APIRouter(prefix="/reviews", tags=["reviews"])

TEST_LIST_PATH = "/api/v1/tests"


def parse_question_ids(raw: str | None) -> list[int] | None:
    """쉼표로 구분된 문제 ID 파싱 ('1,2,3')"""
    if not raw:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise InvalidRequestError(f"잘못된 문제 ID 목록입니다: {raw}")


@router.get(
    "/questions",
    response_model=review_schema.ReviewQuestionListResponse,
    responses={303: {"description": "결과가 없으면 테스트 목록으로 이동"}},
)
async def get_review_questions(
    result_id: int | None = Query(None, description="테스트 결과 ID"),
    question_ids: str | None = Query(None, description="쉼표로 구분된 문제 ID"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """오답 복습 문제 조회 API"""
    if result_id is None:
        return RedirectResponse(TEST_LIST_PATH, status_code=status.HTTP_303_SEE_OTHER)
    try:
        return await wrong_answer_service.get_review_questions(
            db, user, result_id, parse_question_ids(question_ids)
        )
    except ResultNotFoundError:
        return RedirectResponse(TEST_LIST_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.post(
    "",
    response_model=review_schema.WrongAnswerReviewResponse,
    responses={303: {"description": "결과가 없으면 테스트 목록으로 이동"}},
)
async def submit_review(
    request: review_schema.WrongAnswerReviewRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """오답 복습 제출 API"""
    try:
        return await wrong_answer_service.submit_review(db, user, request)
    except ResultNotFoundError:
        return RedirectResponse(TEST_LIST_PATH, status_code=status.HTTP_303_SEE_OTHER)
