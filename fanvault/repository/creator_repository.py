# fanvault/repository/creator_repository.py
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import CreatorProfile
from fanvault.repository.base import BaseRepository
from fanvault.schemas.user import CreatorProfileCreate, CreatorProfileUpdate


class CreatorRepository(BaseRepository[CreatorProfile, CreatorProfileCreate, CreatorProfileUpdate]):
    def __init__(self):
        super().__init__(CreatorProfile)

    async def get_by_user(self, db: AsyncSession, user_id: int) -> Optional[CreatorProfile]:
        stmt = select(CreatorProfile).where(CreatorProfile.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_earnings(self, db: AsyncSession, user_id: int, amount: int) -> None:
        """Увеличение суммарного заработка автора"""
        stmt = (
            update(CreatorProfile)
            .where(CreatorProfile.user_id == user_id)
            .values(total_earnings=CreatorProfile.total_earnings + amount)
        )
        await db.execute(stmt)
        await db.commit()

    async def change_subscribers(self, db: AsyncSession, user_id: int, delta: int) -> None:
        stmt = (
            update(CreatorProfile)
            .where(CreatorProfile.user_id == user_id)
            .values(total_subscribers=CreatorProfile.total_subscribers + delta)
        )
        await db.execute(stmt)
        await db.commit()

    async def change_posts(self, db: AsyncSession, user_id: int, delta: int) -> None:
        stmt = (
            update(CreatorProfile)
            .where(CreatorProfile.user_id == user_id)
            .values(total_posts=CreatorProfile.total_posts + delta)
        )
        await db.execute(stmt)
        await db.commit()


creator_repository = CreatorRepository()
