# fanvault/repository/user_repository.py
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Profile
from fanvault.repository.base import BaseRepository
from fanvault.schemas.user import ProfileUpdate


class ProfileRepository(BaseRepository[Profile, ProfileUpdate, ProfileUpdate]):
    def __init__(self):
        super().__init__(Profile)

    async def get_by_username(self, db: AsyncSession, username: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.username == username)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, db: AsyncSession, user_ids: List[int]) -> List[Profile]:
        if not user_ids:
            return []
        stmt = select(Profile).where(Profile.id.in_(user_ids))
        result = await db.execute(stmt)
        return result.scalars().all()

    async def search_creators(
            self,
            db: AsyncSession,
            query: Optional[str] = None,
            skip: int = 0,
            limit: int = 50
    ) -> List[Profile]:
        """Поиск авторов по username и отображаемому имени"""
        stmt = select(Profile).where(Profile.is_creator == True, Profile.is_active == True)  # noqa: E712

        if query:
            stmt = stmt.where(or_(
                Profile.username.ilike(f"%{query}%"),
                Profile.display_name.ilike(f"%{query}%")
            ))

        stmt = stmt.order_by(Profile.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()


profile_repository = ProfileRepository()
