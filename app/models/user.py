from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(100), default=None)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_MANAGER)  # 'admin', 'manager'

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
