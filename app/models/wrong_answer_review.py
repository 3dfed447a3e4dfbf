from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


class WrongAnswerReview(Base):
    """오답 복습 기록 (추가 전용, 원래 결과는 변경하지 않음)"""

    __tablename__ = "wrong_answer_reviews"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    test_result_id: Mapped[int] = mapped_column(ForeignKey("test_results.id"), nullable=False, index=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("test_questions.id", ondelete="CASCADE"), nullable=False)
    original_answer: Mapped[dict | None] = mapped_column(JSONType, default=None)
    review_answer: Mapped[dict] = mapped_column(JSONType, nullable=False)  # {"selected": [...]}
    is_correct_on_review: Mapped[bool] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
