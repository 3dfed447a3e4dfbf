from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class EducationalPost(Base, TimestampMixin):
    """교육 게시물 (문제의 '더 알아보기' 연결 대상, 읽기 전용)"""

    __tablename__ = "educational_posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    questions: Mapped[list["Question"]] = relationship("Question", back_populates="related_post")
