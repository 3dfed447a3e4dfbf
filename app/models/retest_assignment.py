from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONType, TimestampMixin

RETEST_PENDING = "pending"
RETEST_COMPLETED = "completed"


class RetestAssignment(Base, TimestampMixin):
    __tablename__ = "retest_assignments"

    id: Mapped[int] = mapped_column(primary_key=True)
    admin_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    manager_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    question_ids: Mapped[list[int] | None] = mapped_column(JSONType, default=None)
    reason: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=RETEST_PENDING, index=True)  # 'pending', 'completed'
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    manager: Mapped["User"] = relationship("User", foreign_keys=[manager_id])
