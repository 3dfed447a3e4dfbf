from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.educational_post import EducationalPost


async def get_post_by_id(session: AsyncSession, post_id: int) -> EducationalPost | None:
    """ID로 교육 게시물 조회"""
    result = await session.execute(select(EducationalPost).where(EducationalPost.id == post_id))
    return result.scalar_one_or_none()
