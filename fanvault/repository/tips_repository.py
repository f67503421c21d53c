# fanvault/repository/tips_repository.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Tip
from fanvault.repository.base import BaseRepository
from fanvault.schemas.payment import TipCreate


class TipsRepository(BaseRepository[Tip, TipCreate, TipCreate]):
    def __init__(self):
        super().__init__(Tip)

    async def get_received(
            self,
            db: AsyncSession,
            creator_id: int,
            since: Optional[datetime] = None,
            skip: int = 0,
            limit: int = 100
    ) -> List[Tip]:
        """Чаевые, полученные автором"""
        stmt = select(Tip).where(Tip.creator_id == creator_id)
        if since:
            stmt = stmt.where(Tip.created_at >= since)
        stmt = stmt.order_by(Tip.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_sent(self, db: AsyncSession, tipper_id: int, skip: int = 0, limit: int = 100) -> List[Tip]:
        """Чаевые, отправленные пользователем"""
        return await self.get_by_field(
            db,
            field_name='tipper_id',
            field_value=tipper_id,
            order_by=Tip.created_at.desc(),
            skip=skip,
            limit=limit
        )


tips_repository = TipsRepository()
