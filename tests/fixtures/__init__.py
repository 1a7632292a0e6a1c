"""
Shared test data and store helpers.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.app.models import Like

TEST_PASSWORD = "correct horse battery staple"


async def count_likes(db: AsyncSession, target) -> int:
    """Number of like rows pointing at a ``TargetRef``."""
    result = await db.execute(
        select(func.count(Like.id)).where(Like.target_type == target.kind, Like.target_id == target.id)
    )
    return result.scalar() or 0
