# fanvault/repository/streams_repository.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import LiveStream
from fanvault.repository.base import BaseRepository
from fanvault.schemas.stream import LiveStreamCreate


class StreamsRepository(BaseRepository[LiveStream, LiveStreamCreate, LiveStreamCreate]):
    def __init__(self):
        super().__init__(LiveStream)

    async def get_active_by_creator(self, db: AsyncSession, creator_id: int) -> Optional[LiveStream]:
        stmt = select(LiveStream).where(
            LiveStream.creator_id == creator_id,
            LiveStream.is_active == True  # noqa: E712
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    async def get_by_creator(self, db: AsyncSession, creator_id: int, skip: int = 0, limit: int = 50) -> List[LiveStream]:
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=LiveStream.created_at.desc(),
            skip=skip,
            limit=limit
        )

    async def get_active(self, db: AsyncSession, skip: int = 0, limit: int = 50) -> List[LiveStream]:
        """Идущие сейчас трансляции, самые популярные первыми"""
        return await self.get_by_field(
            db,
            field_name='is_active',
            field_value=True,
            order_by=LiveStream.viewer_count.desc(),
            skip=skip,
            limit=limit
        )


streams_repository = StreamsRepository()
