from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.config import settings
from app.models.base import Base, JSONType, TimestampMixin

QUESTION_TYPE_MULTIPLE_CHOICE = "multiple_choice"
QUESTION_TYPE_SUBJECTIVE = "subjective"


class Question(Base, TimestampMixin):
    __tablename__ = "test_questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sub_category: Mapped[str | None] = mapped_column(String(100), default=None)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    question_image_urls: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    question_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QUESTION_TYPE_MULTIPLE_CHOICE
    )  # 'multiple_choice', 'subjective'
    # 객관식 전용
    options: Mapped[list[str] | None] = mapped_column(JSONType, default=None)
    correct_answer: Mapped[list[int] | None] = mapped_column(JSONType, default=None)
    # 주관식 전용
    grading_criteria: Mapped[str | None] = mapped_column(Text, default=None)
    model_answer: Mapped[str | None] = mapped_column(Text, default=None)
    max_score: Mapped[int] = mapped_column(nullable=False, default=settings.grading_default_max_score)
    related_post_id: Mapped[int | None] = mapped_column(
        ForeignKey("educational_posts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    related_post: Mapped["EducationalPost"] = relationship("EducationalPost", back_populates="questions")

    @property
    def is_subjective(self) -> bool:
        return self.question_type == QUESTION_TYPE_SUBJECTIVE

    @property
    def correct_answer_set(self) -> frozenset[int]:
        """정답 인덱스 집합 (저장 형식이 깨진 경우 빈 집합)"""
        if not isinstance(self.correct_answer, list):
            return frozenset()
        return frozenset(i for i in self.correct_answer if isinstance(i, int))
