from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.wrong_answer_review import WrongAnswerReview


async def create_wrong_answer_reviews(
    session: AsyncSession,
    user_id: int,
    test_result_id: int,
    items: list[tuple[int, list[int], bool]],
) -> list[WrongAnswerReview]:
    """오답 복습 기록 일괄 저장

    Args:
        items: (question_id, 선택한 인덱스, 정답 여부) 목록
    """
    reviews = [
        WrongAnswerReview(
            user_id=user_id,
            test_result_id=test_result_id,
            question_id=question_id,
            original_answer=None,
            review_answer={"selected": selected},
            is_correct_on_review=is_correct,
        )
        for question_id, selected, is_correct in items
    ]
    session.add_all(reviews)
    await session.commit()
    return reviews


async def get_wrong_answer_reviews_by_result(
    session: AsyncSession,
    test_result_id: int,
) -> Sequence[WrongAnswerReview]:
    """테스트 결과별 복습 기록"""
    stmt = (
        select(WrongAnswerReview)
        .where(WrongAnswerReview.test_result_id == test_result_id)
        .order_by(WrongAnswerReview.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()
