# fanvault/repository/welcome_messages_repository.py
from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import WelcomeMessage
from fanvault.repository.base import BaseRepository
from fanvault.schemas.message import WelcomeMessageCreate, WelcomeMessageUpdate


class WelcomeMessagesRepository(BaseRepository[WelcomeMessage, WelcomeMessageCreate, WelcomeMessageUpdate]):
    def __init__(self):
        super().__init__(WelcomeMessage)

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            active_only: bool = False
    ) -> List[WelcomeMessage]:
        """Цепочка приветственных сообщений в порядке отправки"""
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=WelcomeMessage.sequence_order.asc(),
            is_active=True if active_only else None
        )

    async def next_sequence_order(self, db: AsyncSession, creator_id: int) -> int:
        stmt = select(func.max(WelcomeMessage.sequence_order)).where(
            WelcomeMessage.creator_id == creator_id
        )
        result = await db.execute(stmt)
        return (result.scalar() or 0) + 1


welcome_messages_repository = WelcomeMessagesRepository()
