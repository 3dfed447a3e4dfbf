from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

STATUS_PENDING = "pending"
STATUS_AI_GRADED = "ai_graded"
STATUS_ADMIN_REVIEWED = "admin_reviewed"

# 상태는 이 순서로만 전이
STATUS_ORDER = (STATUS_PENDING, STATUS_AI_GRADED, STATUS_ADMIN_REVIEWED)
REVIEW_QUEUE_STATUSES = (STATUS_PENDING, STATUS_AI_GRADED)


class SubjectiveAnswer(Base, TimestampMixin):
    __tablename__ = "subjective_answers"

    id: Mapped[int] = mapped_column(primary_key=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("test_questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    test_result_id: Mapped[int | None] = mapped_column(ForeignKey("test_results.id"), nullable=True, index=True)
    answer_text: Mapped[str | None] = mapped_column(Text, default=None)
    image_url: Mapped[str | None] = mapped_column(Text, default=None)

    ai_score: Mapped[float | None] = mapped_column(Float, default=None)
    ai_feedback: Mapped[str | None] = mapped_column(Text, default=None)  # JSON 문자열
    ai_graded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    admin_score: Mapped[float | None] = mapped_column(Float, default=None)
    admin_feedback: Mapped[str | None] = mapped_column(Text, default=None)
    admin_reviewer_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    admin_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    final_score: Mapped[float | None] = mapped_column(Float, default=None)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=STATUS_PENDING, index=True
    )  # 'pending', 'ai_graded', 'admin_reviewed'

    question: Mapped["Question"] = relationship("Question")
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    test_result: Mapped["ExamResult"] = relationship("ExamResult", back_populates="subjective_answers")
