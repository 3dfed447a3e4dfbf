from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONType


class ExamResult(Base):
    """테스트 결과 (제출 시 1회 생성, 이후 변경 없음)"""

    __tablename__ = "test_results"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[int] = mapped_column(nullable=False)
    correct_count: Mapped[int] = mapped_column(nullable=False)
    total_count: Mapped[int] = mapped_column(nullable=False)
    category_scores: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    test_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    subjective_answers: Mapped[list["SubjectiveAnswer"]] = relationship(
        "SubjectiveAnswer",
        back_populates="test_result",
    )
