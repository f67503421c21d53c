# fanvault/repository/follows_repository.py
from typing import List

from sqlalchemy import select, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Follow


class FollowsRepository:
    def __init__(self):
        self.model = Follow

    async def is_following(self, db: AsyncSession, follower_id: int, following_id: int) -> bool:
        stmt = select(Follow).where(
            and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(self, db: AsyncSession, follower_id: int, following_id: int) -> Follow:
        """Создание подписки на обновления с проверкой на дубликат"""
        if await self.is_following(db, follower_id, following_id):
            raise ValueError("Already following this user")

        follow = Follow(follower_id=follower_id, following_id=following_id)
        db.add(follow)
        await db.commit()
        await db.refresh(follow)
        return follow

    async def delete(self, db: AsyncSession, follower_id: int, following_id: int) -> bool:
        stmt = delete(Follow).where(
            and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    async def get_following_ids(self, db: AsyncSession, follower_id: int) -> List[int]:
        stmt = select(Follow.following_id).where(Follow.follower_id == follower_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())


follows_repository = FollowsRepository()
