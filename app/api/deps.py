from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import user as user_crud
from app.exceptions import AuthenticationRequiredError, PermissionDeniedError
from app.models.base import get_db
from app.models.user import User


async def get_current_user(
    x_user_id: int | None = Header(None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """X-User-Id 헤더로 호출자 식별"""
    if x_user_id is None:
        raise AuthenticationRequiredError()
    user = await user_crud.get_user_by_id(db, x_user_id)
    if not user:
        raise AuthenticationRequiredError("등록되지 않은 사용자입니다.")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
